"""State machine, mixer, WAV framing, settings, screen layout and server client of a voice restyling device."""

__version__ = "0.1.0"

__all__ = [
    "app_state",
    "http_client",
    "log",
    "mixer",
    "nvs_store",
    "render",
    "request_id",
    "response_parser",
    "styles_api",
    "wav_header",
]