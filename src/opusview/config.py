"""Configuration management for Opusview.

Supports TOML configuration format with auto-discovery.
"""

import math
import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

CONFIG_FILENAME = "opusview.toml"

DEFAULT_API_URL = "https://api.bilibili.com/x/polymer/web-dynamic/v1/opus/detail"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_FEATURES = [
    "onlyfansVote",
    "onlyfansAssetsV2",
    "decorationCard",
    "htmlNewStyle",
    "ugcDelete",
    "editable",
    "opusPrivateVisible",
    "tribeeEdit",
    "avatarAutoTheme",
    "avatarTypeOpus",
]
DEFAULT_STYLESHEETS = [
    "https://s1.hdslb.com/bfs/static/stone-free/opus-detail/css/"
    "opus-detail.0.cfe8274d62b9ef5e70e578525ae89e1f70da8c84.css",
    "https://s1.hdslb.com/bfs/static/stone-free/opus-detail/css/"
    "opus-detail.1.cfe8274d62b9ef5e70e578525ae89e1f70da8c84.css",
]


@dataclass
class ServerConfig:
    """Server configuration."""

    host: str = "127.0.0.1"
    port: int = 2333
    default_opus_id: str | None = None


@dataclass
class BilibiliConfig:
    """Upstream API configuration."""

    api_url: str = DEFAULT_API_URL
    cookie: str | None = None
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = 10.0
    features: list[str] = field(default_factory=lambda: list(DEFAULT_FEATURES))


@dataclass(frozen=True)
class RenderConfig:
    """Paragraph rendering options.

    scoped_attr is the Vue scoped-style attribute stamped on text and heading
    elements; None or False disables it.
    """

    scoped_attr: str | bool | None = "data-v-2505e99a"
    image_display_width: float = 596
    picture_srcset_width: int = 1192
    h1_size: float = 26
    h2_size: float = 22
    heading_strong: bool = True
    image_aspect_ratio: float = 0.56
    rule_height: float = 2

    def __post_init__(self) -> None:
        """Reject numeric options that would divide by zero or emit NaN CSS.

        Raises:
            ValueError: If a numeric option is not finite and positive
        """
        for name in ("image_display_width", "h1_size", "h2_size", "image_aspect_ratio", "rule_height"):
            _positive(getattr(self, name), f"render.{name}")
        width = self.picture_srcset_width
        if not isinstance(width, int) or isinstance(width, bool):
            raise ValueError("render.picture_srcset_width must be an integer")
        if width <= 0:
            raise ValueError("render.picture_srcset_width must be positive")


@dataclass
class PageConfig:
    """Standalone page configuration."""

    max_width: int = 708
    stylesheets: list[str] = field(default_factory=lambda: list(DEFAULT_STYLESHEETS))


@dataclass
class Config:
    """Application configuration."""

    server: ServerConfig
    bilibili: BilibiliConfig
    render: RenderConfig
    page: PageConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for opusview.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents."""
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> "Config":
        return cls(
            server=ServerConfig(),
            bilibili=BilibiliConfig(),
            render=RenderConfig(),
            page=PageConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            data = tomllib.load(f)

        if not isinstance(data, dict):
            raise ValueError("Configuration must be a dictionary")

        return cls(
            server=cls._parse_server(data.get("server")),
            bilibili=cls._parse_bilibili(data.get("bilibili")),
            render=cls._parse_render(data.get("render")),
            page=cls._parse_page(data.get("page")),
            config_path=path,
        )

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        if data is None:
            return ServerConfig()

        if not isinstance(data, dict):
            raise ValueError("server section must be a dictionary")

        host = data.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = data.get("port", 2333)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        default_opus_id = data.get("default_opus_id")
        if isinstance(default_opus_id, int) and not isinstance(default_opus_id, bool):
            default_opus_id = str(default_opus_id)
        if default_opus_id is not None and not isinstance(default_opus_id, str):
            raise ValueError("server.default_opus_id must be a string")

        return ServerConfig(host=host, port=port, default_opus_id=default_opus_id)

    @classmethod
    def _parse_bilibili(cls, data: object) -> BilibiliConfig:
        """Parse bilibili configuration section.

        Args:
            data: Raw bilibili section data

        Returns:
            BilibiliConfig instance
        """
        if data is None:
            return BilibiliConfig()

        if not isinstance(data, dict):
            raise ValueError("bilibili section must be a dictionary")

        api_url = data.get("api_url", DEFAULT_API_URL)
        if not isinstance(api_url, str):
            raise ValueError("bilibili.api_url must be a string")

        cookie = data.get("cookie")
        if cookie is not None and not isinstance(cookie, str):
            raise ValueError("bilibili.cookie must be a string")

        user_agent = data.get("user_agent", DEFAULT_USER_AGENT)
        if not isinstance(user_agent, str):
            raise ValueError("bilibili.user_agent must be a string")

        timeout = _number(data.get("timeout", 10.0), "bilibili.timeout")

        features_raw = data.get("features", DEFAULT_FEATURES)
        if not isinstance(features_raw, list):
            raise ValueError("bilibili.features must be a list")
        features: list[str] = []
        for item in features_raw:
            if not isinstance(item, str):
                raise ValueError("bilibili.features items must be strings")
            features.append(item)

        return BilibiliConfig(
            api_url=api_url,
            cookie=cookie,
            user_agent=user_agent,
            timeout=timeout,
            features=features,
        )

    @classmethod
    def _parse_render(cls, data: object) -> RenderConfig:
        """Parse render configuration section.

        Numeric options must be finite and positive so that no NaN or
        infinity can reach emitted CSS.

        Args:
            data: Raw render section data

        Returns:
            RenderConfig instance
        """
        if data is None:
            return RenderConfig()

        if not isinstance(data, dict):
            raise ValueError("render section must be a dictionary")

        defaults = RenderConfig()

        scoped_attr = data.get("scoped_attr", defaults.scoped_attr)
        if scoped_attr is True:
            scoped_attr = defaults.scoped_attr
        if scoped_attr is not False and not isinstance(scoped_attr, str):
            raise ValueError("render.scoped_attr must be a string or false")

        heading_strong = data.get("heading_strong", defaults.heading_strong)
        if not isinstance(heading_strong, bool):
            raise ValueError("render.heading_strong must be a boolean")

        picture_srcset_width = data.get("picture_srcset_width", defaults.picture_srcset_width)
        if not isinstance(picture_srcset_width, int) or isinstance(picture_srcset_width, bool):
            raise ValueError("render.picture_srcset_width must be an integer")
        if picture_srcset_width <= 0:
            raise ValueError("render.picture_srcset_width must be positive")

        return RenderConfig(
            scoped_attr=scoped_attr or None,
            image_display_width=_positive(
                data.get("image_display_width", defaults.image_display_width),
                "render.image_display_width",
            ),
            picture_srcset_width=picture_srcset_width,
            h1_size=_positive(data.get("h1_size", defaults.h1_size), "render.h1_size"),
            h2_size=_positive(data.get("h2_size", defaults.h2_size), "render.h2_size"),
            heading_strong=heading_strong,
            image_aspect_ratio=_positive(
                data.get("image_aspect_ratio", defaults.image_aspect_ratio),
                "render.image_aspect_ratio",
            ),
            rule_height=_positive(data.get("rule_height", defaults.rule_height), "render.rule_height"),
        )

    @classmethod
    def _parse_page(cls, data: object) -> PageConfig:
        if data is None:
            return PageConfig()

        if not isinstance(data, dict):
            raise ValueError("page section must be a dictionary")

        max_width = data.get("max_width", 708)
        if not isinstance(max_width, int) or isinstance(max_width, bool):
            raise ValueError("page.max_width must be an integer")

        stylesheets_raw = data.get("stylesheets", DEFAULT_STYLESHEETS)
        if not isinstance(stylesheets_raw, list):
            raise ValueError("page.stylesheets must be a list")
        stylesheets: list[str] = []
        for item in stylesheets_raw:
            if not isinstance(item, str):
                raise ValueError("page.stylesheets items must be strings")
            stylesheets.append(item)

        return PageConfig(max_width=max_width, stylesheets=stylesheets)

    def with_overrides(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        cookie: str | None = None,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Args:
            host: Override server.host
            port: Override server.port
            cookie: Override bilibili.cookie

        Returns:
            New Config instance with overrides applied
        """
        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        bilibili = self.bilibili
        if cookie is not None:
            bilibili = replace(self.bilibili, cookie=cookie)

        return replace(self, server=server, bilibili=bilibili)


def _number(value: object, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValueError(f"{name} must be a number")
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite")
    return value


def _positive(value: object, name: str) -> float:
    number = _number(value, name)
    if number <= 0:
        raise ValueError(f"{name} must be positive")
    return number
