import ast
import builtins
from dataclasses import dataclass, field
from typing import Any

REQUEST_NAME = "REQUEST"


def _default_namespace() -> dict[str, Any]:
    return {"__name__": "__sockrepl__", "__builtins__": builtins}


@dataclass
class EvaluationContext:
    """
    Process-wide state that submitted code runs against.

    A single instance is shared by every connection and every request, with
    no isolation and no locking: names bound by one request stay visible to
    all later requests, whichever client sends them. The most recently
    received request is published in the namespace as `REQUEST`; with
    several clients interleaving, code may observe another client's request
    there.

    Submitted code runs with the full privileges of the host process. The
    only access control is the filesystem permission on the listening
    socket.
    """
    namespace: dict[str, Any] = field(default_factory=_default_namespace)
    """
    Globals used for every `exec`/`eval`.
    """

    filename: str = "<sockrepl>"
    """
    Filename reported in tracebacks and syntax errors.
    """

    request: dict[str, Any] | None = None
    """
    The current-request slot, overwritten on every request.
    """

    def publish(self, request: dict[str, Any]) -> None:
        self.request = request
        self.namespace[REQUEST_NAME] = request

    def evaluate(self, code: str) -> Any:
        """
        Execute `code` and return its value.

        Statements run in order; if the last statement is a bare expression,
        its value is returned, as in an interactive interpreter. Otherwise
        the result is None.
        """
        tree = ast.parse(code, filename=self.filename, mode="exec")

        tail: ast.Expression | None = None
        if tree.body and isinstance(tree.body[-1], ast.Expr):
            tail = ast.Expression(body=tree.body.pop().value)

        if tree.body:
            exec(compile(tree, self.filename, "exec"), self.namespace)

        if tail is None:
            return None

        return eval(compile(tail, self.filename, "eval"), self.namespace)
