from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping

from .models import ConversionSettings, ImageEncoding


CONFIG_FILE = Path("config.toml")


@dataclass(slots=True)
class RenderConfig:
    dpi: int = 300
    encoding: str = "png"
    jpeg_quality: int = 90
    dpi_presets: tuple[int, ...] = (72, 150, 300)

    def to_settings(self, *, dpi: int | None = None, encoding: str | None = None) -> ConversionSettings:
        return ConversionSettings(
            dpi=dpi if dpi is not None else self.dpi,
            encoding=ImageEncoding.parse(encoding or self.encoding),
            jpeg_quality=self.jpeg_quality,
        )


@dataclass(slots=True)
class RuntimeConfig:
    output_dir: Path = Path("output")
    log_file: str = "log.jsonl"
    max_file_size_mb: int = 50
    max_pages_warning: int = 100
    page_pause_s: float = 0.05


@dataclass(slots=True)
class AppConfig:
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    render: RenderConfig = field(default_factory=RenderConfig)


def _read_toml(path: Path) -> Mapping[str, object]:
    if not path.exists():
        return {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _build_runtime(data: Mapping[str, object] | None) -> RuntimeConfig:
    if not data:
        return RuntimeConfig()
    return RuntimeConfig(
        output_dir=Path(str(data.get("output_dir", "output"))),
        log_file=str(data.get("log_file", "log.jsonl")),
        max_file_size_mb=int(data.get("max_file_size_mb", 50)),
        max_pages_warning=int(data.get("max_pages_warning", 100)),
        page_pause_s=float(data.get("page_pause_s", 0.05)),
    )


def _tuple_of_ints(value: object | None, default: Iterable[int]) -> tuple[int, ...]:
    if not value:
        return tuple(default)
    if isinstance(value, (int, str)):
        return (int(value),)
    if isinstance(value, Iterable):
        return tuple(int(item) for item in value)
    raise TypeError(f"Unsupported dpi_presets configuration: {value!r}")


def _build_render(data: Mapping[str, object] | None) -> RenderConfig:
    if not data:
        return RenderConfig()
    encoding = str(data.get("encoding", "png"))
    # Fail on load rather than on the first conversion.
    ImageEncoding.parse(encoding)
    return RenderConfig(
        dpi=int(data.get("dpi", 300)),
        encoding=encoding,
        jpeg_quality=int(data.get("jpeg_quality", 90)),
        dpi_presets=_tuple_of_ints(data.get("dpi_presets"), RenderConfig().dpi_presets),
    )


def load_config(path: Path | None = None) -> AppConfig:
    path = path or CONFIG_FILE
    raw = _read_toml(path)
    runtime_data = raw.get("runtime") if isinstance(raw, Mapping) else None
    render_data = raw.get("render") if isinstance(raw, Mapping) else None
    runtime = _build_runtime(runtime_data if isinstance(runtime_data, Mapping) else None)
    render = _build_render(render_data if isinstance(render_data, Mapping) else None)
    return AppConfig(runtime=runtime, render=render)


def dump_config(config: AppConfig) -> str:
    payload = {
        "runtime": {
            "output_dir": str(config.runtime.output_dir),
            "log_file": config.runtime.log_file,
            "max_file_size_mb": config.runtime.max_file_size_mb,
            "max_pages_warning": config.runtime.max_pages_warning,
            "page_pause_s": config.runtime.page_pause_s,
        },
        "render": {
            "dpi": config.render.dpi,
            "encoding": config.render.encoding,
            "jpeg_quality": config.render.jpeg_quality,
            "dpi_presets": list(config.render.dpi_presets),
        },
    }
    return json.dumps(payload, indent=2)
