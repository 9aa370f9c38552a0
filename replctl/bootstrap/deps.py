from functools import lru_cache

from replctl.core.cmd import ReplCmd
from replctl.infra.format_renderer import RENDERERS
from sockrepl.infra.json_serializer import JsonSerializer


@lru_cache
def get_cli() -> ReplCmd:
    serializer = JsonSerializer()
    return ReplCmd(serializer, RENDERERS)
