import asyncio
import json
import os
import struct
from dataclasses import dataclass
from typing import Any

from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, YamlConfigSettingsSource

from sockrepl.bootstrap.config.settings import SockReplConfig


@dataclass
class FramedClient:
    reader: asyncio.StreamReader
    writer: asyncio.StreamWriter

    async def send(self, payload: bytes) -> None:
        self.writer.write(struct.pack("<I", len(payload)) + payload)
        await self.writer.drain()

    async def recv(self) -> dict[str, Any]:
        header = await self.reader.readexactly(4)
        (size,) = struct.unpack("<I", header)
        return json.loads(await self.reader.readexactly(size))

    async def request(self, code: str, **fields: Any) -> dict[str, Any]:
        await self.send(json.dumps({"code": code, **fields}).encode("utf-8"))
        return await self.recv()

    async def close(self) -> None:
        self.writer.close()
        await self.writer.wait_closed()


async def open_client(path) -> FramedClient:
    reader, writer = await asyncio.open_unix_connection(str(path))
    return FramedClient(reader, writer)


class FakeSockReplConfig(SockReplConfig):
    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [init_settings, env_settings]
        if file := os.environ.get("TEST_SOCKREPLCONFIG"):
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=file))
        return tuple(sources)
