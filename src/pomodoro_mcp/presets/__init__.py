"""Timer preset models and loader exports."""

from .loader import PresetLoadError, PresetLoader, PresetNotFoundError
from .models import TimerPreset

__all__ = ["PresetLoadError", "PresetLoader", "PresetNotFoundError", "TimerPreset"]
