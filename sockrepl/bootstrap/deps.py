import json
from functools import lru_cache

from pydantic import ValidationError

from sockrepl.bootstrap.config.loader import get_cli_args
from sockrepl.bootstrap.config.settings import SockReplConfig
from sockrepl.core.controlplane import ControlPlane
from sockrepl.infra.json_serializer import JsonSerializer


@lru_cache
def get_cp() -> ControlPlane:
    return ControlPlane(
        config=get_config(),
        serializer=JsonSerializer(),
    )


@lru_cache
def get_config() -> SockReplConfig:
    cli = get_cli_args()
    overrides = {}
    if cli.socket:
        overrides["server"] = {"socket_path": cli.socket}

    try:
        return SockReplConfig(**overrides)
    except FileNotFoundError as ex:
        raise SystemExit(f"Provide a correct configuration file path: {ex}")
    except ValidationError as ex:
        msg = ["Configuration validation failed:"]
        errs = json.loads(ex.json())
        for err in errs:
            msg.append(f"  {'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}")
        raise SystemExit("\n".join(msg))
