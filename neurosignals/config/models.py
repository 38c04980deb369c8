# neurosignals/config/models.py

"""
Pydantic models for defining the structure and validation of the neurosignals
configuration (neurosignals.toml).
Uses Pydantic V2 syntax.
"""

from pathlib import Path
from typing import Literal, Optional, Union, Any

from pydantic import BaseModel, Field, field_validator, ConfigDict

# --- Helper Functions ---

def _resolve_path(path: Union[str, Path]) -> Path:
    """Resolves and expands user paths."""
    return Path(path).expanduser().resolve()

# --- Model Definitions ---

class DefaultsConfig(BaseModel):
    """Default processing parameters."""
    default_psd_window: str = Field("hann", description="Window applied before periodogram estimation.")
    histogram_bins: Literal["sqrt", "sturges"] = Field(
        "sqrt", description="Rule for the number of histogram bins used by entropy and mutual information."
    )

class AnalysisConfig(BaseModel):
    """Default parameters of the analytics engine."""
    autocov_lag: int = Field(1, ge=0, description="Default maximum lag (samples) for auto/cross-covariance.")
    stationarity_window: int = Field(10, ge=1, description="Segment length (samples) for stationarity.")
    stationarity_method: Literal["mean", "var", "euclid", "hilbert"] = "hilbert"
    bootstrap_n: int = Field(3, ge=1, description="Bootstrap draws per channel in the difference test.")
    difference_method: Literal["absdiff", "diff2int"] = "absdiff"
    spectrogram_segment_sec: float = Field(1.0, gt=0, description="Spectrogram segment length in seconds.")
    spectrogram_overlap: float = Field(0.5, ge=0, lt=1.0, description="Spectrogram overlap ratio (0.0 to < 1.0).")
    random_seed: Optional[int] = Field(None, description="Seed for bootstrap resampling; None draws fresh entropy.")

class PathsConfig(BaseModel):
    """Configuration for file paths used by neurosignals."""
    log_directory: Path = Field(default=Path("./neurosignals_logs"), description="Directory for log files.")

    @field_validator('log_directory', mode='before')
    @classmethod
    def resolve_paths_before_validation(cls, value: Any) -> Path:
        """Resolves paths before Pydantic validates them."""
        if isinstance(value, (str, Path)):
            return _resolve_path(value)
        return value

class LoggingConfig(BaseModel):
    """Logging configuration settings."""
    log_file_enabled: bool = Field(False, description="Enable/disable persistent file logging.")
    log_filename_template: str = Field("neurosignals_{timestamp:%Y%m%d_%H%M%S}.log", description="Naming pattern for log files.")
    log_level_file: str = Field("DEBUG", description="Minimum level for file logs (DEBUG, INFO, WARNING, ERROR, CRITICAL).")
    log_format: str = Field("%(asctime)s [%(levelname)-8s] %(name)-30s - %(message)s (%(filename)s:%(lineno)d)", description="Format string for file log entries.")
    log_level_console: str = Field("INFO", description="Default minimum level for console output (overridden by verbosity).")

    @field_validator('log_level_file', 'log_level_console')
    @classmethod
    def check_log_level(cls, value: str) -> str:
        """Validate log level strings."""
        allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in allowed_levels:
            raise ValueError(f"Invalid log level '{value}'. Must be one of {allowed_levels}")
        return upper_value

class NeurosignalsConfig(BaseModel):
    """Root configuration model for neurosignals."""
    model_config = ConfigDict(
        extra='ignore',
        validate_assignment=True
    )

    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
