from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from gbakaguides.config.models import (
    AppConfig,
    AppSettings,
    CorsSettings,
    DirectionsSettings,
    LoggingSettings,
    MapboxSettings,
    OSMSettings,
    ProviderSettings,
    SearchSettings,
    WebSettings,
)


DEFAULT_CONFIG_PATH = "config/default.json"
_MODES = ("development", "production", "test")
_PROFILES = ("driving", "driving-traffic", "walking", "cycling")
# Local frontend dev servers, allowed by CORS in development and test modes.
DEV_ORIGINS = ("http://localhost:5173", "http://localhost:3000")


class ConfigError(ValueError):
    """Raised when the runtime configuration cannot be used to start the gateway."""


def _as_path(value: str, *, base_dir: Path) -> Path:
    candidate = Path(value)
    return candidate if candidate.is_absolute() else (base_dir / candidate)


def _read_raw(path: Optional[str | Path]) -> Mapping[str, Any]:
    explicit = path or os.getenv("GBAKAGUIDES_CONFIG_PATH")
    config_path = Path(explicit or DEFAULT_CONFIG_PATH).resolve()
    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {config_path}")
        # Every field has a built-in default, so a missing default file is fine.
        return {}
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {config_path}: {exc}") from exc
    if not isinstance(raw, Mapping):
        raise ConfigError(f"Config root must be an object: {config_path}")
    return raw


def _env_str(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _split_origins(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


def load_config(
    path: Optional[str | Path] = None,
    *,
    base_dir: Optional[Path] = None,
    env_file: Optional[str] = ".env",
) -> AppConfig:
    """
    Load typed application config from JSON, then apply environment overrides.

    - `.env` is loaded first (python-dotenv) without overriding real env vars.
    - `MAPBOX_TOKEN` is required unless the mode is `test`.
    """

    if env_file:
        load_dotenv(env_file)

    base_dir = (base_dir or Path.cwd()).resolve()
    raw = _read_raw(path)

    app_raw: Mapping[str, Any] = raw.get("app", {})
    mode = _env_str("GBAKAGUIDES_ENV") or str(app_raw.get("mode", "development"))
    mode = mode.lower()
    if mode not in _MODES:
        raise ConfigError(f"Unsupported mode: {mode} (expected one of {', '.join(_MODES)})")
    app = AppSettings(
        name=str(app_raw.get("name", "Gbaka Guides API")),
        version=str(app_raw.get("version", "1.0.0")),
        mode=mode,  # type: ignore[arg-type]
    )

    providers_raw: Mapping[str, Any] = raw.get("providers", {})
    mapbox_raw: Mapping[str, Any] = providers_raw.get("mapbox", {})
    osm_raw: Mapping[str, Any] = providers_raw.get("osm", {})
    token = _env_str("MAPBOX_TOKEN") or mapbox_raw.get("access_token") or None
    if not token and app.mode != "test":
        raise ConfigError("Missing env var: MAPBOX_TOKEN (add it to your environment or .env)")
    providers = ProviderSettings(
        mapbox=MapboxSettings(
            access_token=token,
            base_url=str(mapbox_raw.get("base_url", "https://api.mapbox.com")).rstrip("/"),
            style=str(mapbox_raw.get("style", "mapbox/streets-v12")),
            tile_size=int(mapbox_raw.get("tile_size", 512)),
        ),
        osm=OSMSettings(
            nominatim_url=str(osm_raw.get("nominatim_url", "https://nominatim.openstreetmap.org/search")),
            tile_url_template=str(
                osm_raw.get("tile_url_template", "https://tile.openstreetmap.org/{z}/{x}/{y}.png")
            ),
        ),
        timeout_s=float(providers_raw.get("timeout_s", 8.0)),
        user_agent=str(providers_raw.get("user_agent", f"gbakaguides/{app.version}")),
    )
    if providers.timeout_s <= 0:
        raise ConfigError(f"providers.timeout_s must be > 0, got {providers.timeout_s}")

    search_raw: Mapping[str, Any] = raw.get("search", {})
    viewbox = tuple(float(v) for v in search_raw.get("viewbox", (-4.2, 5.1, -3.9, 5.5)))
    if len(viewbox) != 4:
        raise ConfigError("search.viewbox must have 4 values: west, south, east, north")
    search = SearchSettings(
        city_name=str(search_raw.get("city_name", "Abidjan")),
        city_aliases=tuple(str(a).lower() for a in search_raw.get("city_aliases", ("abidjan", "abj"))),
        country=str(search_raw.get("country", "ci")).lower(),
        language=str(search_raw.get("language", "fr")),
        viewbox=viewbox,  # type: ignore[arg-type]
        bounded=bool(search_raw.get("bounded", True)),
        default_limit=int(search_raw.get("default_limit", 5)),
        max_limit=int(search_raw.get("max_limit", 20)),
        two_segment_labels=bool(search_raw.get("two_segment_labels", False)),
        geocode_types=tuple(
            str(t) for t in search_raw.get("geocode_types", ("poi", "address", "neighborhood", "place"))
        ),
    )
    if not 1 <= search.default_limit <= search.max_limit:
        raise ConfigError("search.default_limit must be between 1 and search.max_limit")

    directions_raw: Mapping[str, Any] = raw.get("directions", {})
    directions = DirectionsSettings(
        default_profile=str(directions_raw.get("default_profile", "driving")),  # type: ignore[arg-type]
        include_alternatives=bool(directions_raw.get("include_alternatives", False)),
    )
    if directions.default_profile not in _PROFILES:
        raise ConfigError(f"Unsupported directions.default_profile: {directions.default_profile}")

    cors_raw: Mapping[str, Any] = raw.get("cors", {})
    origins_env = _env_str("GBAKAGUIDES_CORS_ORIGINS")
    origins = (
        _split_origins(origins_env)
        if origins_env
        else tuple(str(o) for o in cors_raw.get("allowed_origins", ()))
    )
    # Production trusts only explicitly configured origins; an empty list means same-origin only.
    if not app.is_production:
        dev_origins = tuple(str(o) for o in cors_raw.get("dev_origins", DEV_ORIGINS))
        origins = origins + tuple(o for o in dev_origins if o not in origins)
    cors = CorsSettings(
        allowed_origins=origins,
        allow_credentials=bool(cors_raw.get("allow_credentials", True)),
    )

    logging_raw: Mapping[str, Any] = raw.get("logging", {})
    file_value = logging_raw.get("file")
    log_file = None if not file_value else _as_path(str(file_value), base_dir=base_dir)
    logging_settings = LoggingSettings(
        level=_env_str("GBAKAGUIDES_LOG_LEVEL") or str(logging_raw.get("level", "INFO")),
        format=str(logging_raw.get("format", "%(asctime)s %(levelname)s %(name)s - %(message)s")),
        file=log_file,
    )

    web_raw: Mapping[str, Any] = raw.get("web", {})
    port_value = _env_str("GBAKAGUIDES_PORT") or _env_str("PORT") or web_raw.get("port", 3001)
    try:
        port = int(port_value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid port: {port_value!r}") from exc
    api_prefix = "/" + str(web_raw.get("api_prefix", "/api")).strip("/")
    web = WebSettings(
        static_dir=_as_path(str(web_raw.get("static_dir", "backend/public")), base_dir=base_dir),
        api_prefix="" if api_prefix == "/" else api_prefix,
        host=_env_str("GBAKAGUIDES_HOST") or str(web_raw.get("host", "127.0.0.1")),
        port=port,
    )

    return AppConfig(
        app=app,
        providers=providers,
        search=search,
        directions=directions,
        cors=cors,
        logging=logging_settings,
        web=web,
    )
