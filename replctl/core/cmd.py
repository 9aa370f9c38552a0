import argparse
import cmd
import os

from replctl.core.client import ReplClient
from replctl.core.ports.render import Renderer
from sockrepl.core.models.config import DEFAULT_SOCKET_PATH
from sockrepl.core.ports.serializer import Serializer


class ReplCmd(cmd.Cmd):
    intro = "Entering replctl interactive mode. Type 'exit' or 'quit' to leave."
    prompt = "replctl> "

    def __init__(
        self,
        serializer: Serializer,
        renderers: dict[str, type[Renderer]],
        argv: list[str] | None = None,
    ) -> None:
        super().__init__()

        self._argparser = self._argparse(sorted(renderers))
        self._args = self._argparser.parse_args(argv)
        self._renderer = renderers[self._args.output]()
        self._client = ReplClient(self._resolve_socket(), serializer)
        self.prompt = f"replctl({self._client.path.name})> "

    @property
    def args(self) -> argparse.Namespace:
        return self._args

    @property
    def interactive(self) -> bool:
        return self._args.code is None

    def close(self) -> None:
        self._client.close()

    def run(self) -> int:
        """Execute the one-shot `--code`; the exit status tells how it went."""
        return 0 if self.handle(self._args.code) else 1

    def handle(self, code: str) -> bool:
        try:
            response = self._client.request(code)
        except (OSError, ValueError) as ex:
            print(f"error: {ex}")
            self._client.close()
            return False

        print(self._renderer.render(response))
        return "error" not in response

    def default(self, line: str) -> None:
        self.handle(line)

    def emptyline(self) -> bool:
        return False

    def do_exit(self, arg):
        return True

    def do_quit(self, arg):
        return True

    def do_EOF(self, arg):
        print()
        return True

    def _resolve_socket(self) -> str:
        # Priority: CLI > ENV > default path
        return (
            self._args.socket
            or os.getenv("SOCKREPL_SOCKET")
            or str(DEFAULT_SOCKET_PATH)
        )

    @staticmethod
    def _argparse(outputs: list[str]) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="replctl",
            description="Send Python code to a running sockrepl server.",
        )
        parser.add_argument("-s", "--socket", help="Path of the server socket")
        parser.add_argument(
            "-o", "--output",
            choices=outputs,
            default="json",
            help="Response format (default: json)",
        )
        parser.add_argument(
            "-c", "--code",
            help="Run CODE once and exit instead of starting the interactive loop",
        )
        return parser
