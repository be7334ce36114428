# restyle-device

The logic behind a small push-to-talk gadget. You hold a button and speak. The recording goes to a "restyle" server, which answers with a WAV file of your words spoken in another style. The device then plays that answer.

The package uses only the standard library. Every piece can be used and tested on its own.

## Modules

- `restyle_device.app_state` holds the device state machine. It defines the `AppState` and `AppEvent` enums and the `AppContext` dataclass. `on_event(ctx, event)` returns the next state and leaves storing it to the caller. Only `ERROR_CLEAR` changes the context: it resets `last_error_retryable`. `state_name(state)` returns the state's upper-case name.
- `restyle_device.mixer` holds `Mixer`, a fixed-voice int16 mixer (two voices by default). It supports per-voice gain, looping and master volume, and clips to the int16 range. `play` and `stop` ignore voice numbers that are out of range. `render(frames, master_volume)` returns a list of samples.
- `restyle_device.wav_header` has `build_wav_header(pcm_bytes)`, which returns the canonical 44-byte header for 16 kHz mono 16-bit PCM. `patch_wav_length(header, pcm_bytes)` returns a copy with the RIFF and data lengths rewritten. Both raise `ValueError` when a length is out of range or a header is too short.
- `restyle_device.request_id` produces deterministic UUIDv4-shaped ids from a seedable xorshift32 generator. Use `RequestIdGenerator`, or the process-wide `seed_request_ids` and `new_request_id`. A seed of zero falls back to the default seed.
- `restyle_device.log` writes single-line records of the form `[  12.345] INFO net upload_done bytes=491520`. Use `Logger(sink, clock)` or the process-wide `set_sink`, `set_clock_ms` and `log_line`. The message is %-formatted with any extra arguments. Nothing is emitted while no sink is set.
- `restyle_device.nvs_store` keeps persisted settings (`NvsState`: style index, style id, volume) in `NvsStore`. The store works over any mutable mapping and uses an in-memory dict by default. `save` returns `False` when a save comes within one second of the previous one.
- `restyle_device.render` lays out the 128×64 status screen. `render_ui(model, display)` draws a `UiModel` onto any object with `clear`, `show`, `text`, `rect` and `hbar` methods. `RecordingDisplay` records those calls, one tuple of operations per shown frame. `rms_to_fill` maps an RMS level to a 0–255 bar fill.
- `restyle_device.response_parser` reads a response's status line and headers with `parse_headers`. It returns `RespHeaders` and raises `HeaderParseError` when the status line is malformed, when Content-Length is missing, or when Content-Length is over 2 MiB. `is_wav` checks for the RIFF/WAVE signature. `url_decode` decodes `%XX` escapes and `+`.
- `restyle_device.styles_api` holds `parse_styles`, which returns up to 16 `Style` entries, and `parse_health`, which returns a `HealthStatus`. `StylesClient(host, port, timeout)` fetches `/v1/styles` and `/healthz`. Failures raise `StylesError`.
- `restyle_device.http_client` sends a `RestyleRequest` through `RestyleClient(host, port).restyle(request, on_milestone)`. The body is multipart, with style id, WAV audio and language. The client reports `Milestone` values as the exchange goes on and returns a `RestyleResult` with the reply and its timings. Failures raise `TransportError`. `build_multipart(request)` returns the boundary and the body without sending anything.

## Example

```python
from restyle_device.app_state import AppContext, AppEvent, AppState, on_event
from restyle_device.mixer import Mixer
from restyle_device.wav_header import build_wav_header

ctx = AppContext(wifi_connected=True)
ctx.state = on_event(ctx, AppEvent.WAKE_PRESS)
assert ctx.state is AppState.RECORDING

mixer = Mixer(2)
mixer.play(0, [100, 200, 300, 400], 0.5, False)
assert mixer.render(4, 1.0) == [50, 100, 150, 200]

header = build_wav_header(320000)
assert header[:4] == b"RIFF" and len(header) == 44
```

## What the package does not do

The package is a library and has no command to run. It does not read buttons, capture from a microphone, drive a speaker or draw on a real screen; `render_ui` needs a display object that you supply. It does not manage Wi-Fi and ships no sound-effect samples. It also contains no loop that wires the state machine, mixer, store and clients together into a running device. `NvsStore` only persists across runs if you give it a mapping that is itself persistent.

## Installing and testing

```
pip install .
pip install ".[test]"
pytest
```