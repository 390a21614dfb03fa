from pathlib import Path
from typing import Final

root_path: Final[Path] = Path(".").resolve()
assets_path: Final[Path] = root_path / "assets"
icon_path: Final[Path] = assets_path / "icon.png"
config_file: Final[Path] = root_path / "config.toml"
log_path: Final[Path] = root_path / "log"
