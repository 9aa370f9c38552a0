from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource, YamlConfigSettingsSource

from sockrepl.bootstrap.config.loader import get_configfile
from sockrepl.core.models.config import DEFAULT_SOCKET_PATH


class ServerSettings(BaseModel):
    socket_path: Annotated[
        Path,
        Field(
            description=(
                "Filesystem path of the AF_UNIX listening socket.\n"
                "A stale socket left at this path by a previous run is removed\n"
                "on startup. '~' is expanded."
            ),
            default=DEFAULT_SOCKET_PATH
        )
    ]

    mode: Annotated[
        int,
        Field(
            description=(
                "Permission bits applied to the socket file (octal).\n"
                "Anyone able to connect can execute code in the server process,\n"
                "so keep this owner-only unless you know why not."
            ),
            default=0o700
        )
    ]

    backlog: Annotated[
        int,
        Field(
            description="Maximum number of pending connections.",
            default=16,
            gt=0
        )
    ]

    max_blob_size: Annotated[
        int,
        Field(
            description=(
                "Largest accepted request payload, in bytes.\n"
                "A frame announcing more closes the connection."
            ),
            default=64 * 1024 * 1024,
            gt=0,
            le=0xFFFFFFFF
        )
    ]

    write_buffer_size: Annotated[
        int,
        Field(
            description="Size of the per-connection write buffer, in bytes.",
            default=64 * 1024,
            gt=0
        )
    ]

    timeout_graceful_shutdown: Annotated[
        float,
        Field(
            description="Maximum time allowed for graceful shutdown.",
            default=5.0,
            ge=0
        )
    ]

    @field_validator("mode", mode="before")
    @classmethod
    def parse_mode(cls, v: Any) -> Any:
        # Environment variables and quoted YAML values arrive as text.
        if isinstance(v, str):
            return int(v, 8)
        return v

    @field_validator("mode")
    @classmethod
    def validate_mode(cls, v: int) -> int:
        if not 0 <= v <= 0o777:
            raise ValueError(f"mode {v:o} is not a valid permission mask")
        return v


class EvalSettings(BaseModel):
    traceback: Annotated[
        bool,
        Field(
            description=(
                "Send the full traceback in error responses instead of\n"
                "'<ExceptionType>: <message>'."
            ),
            default=False
        )
    ]


class SockReplConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SOCKREPL_",
        env_nested_delimiter="__",
        extra="ignore"
    )

    server: Annotated[
        ServerSettings,
        Field(
            description=(
                "Local server configuration.\n"
                "Controls where the socket lives, who may connect to it, and the\n"
                "runtime limits applied to every connection."
            ),
            default_factory=ServerSettings
        )
    ]

    eval: Annotated[
        EvalSettings,
        Field(
            description="How submitted code results are reported.",
            default_factory=EvalSettings
        )
    ]

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Priority: explicit arguments > environment > YAML file
        sources: list[PydanticBaseSettingsSource] = [init_settings, env_settings]
        file = get_configfile()
        if file is not None:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=file))
        return tuple(sources)
