import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sockrepl.core.transport.socket_stream import SocketConnection


@dataclass
class ServerState:
    """
    Shared runtime state for a ReplServer.

    This object is mutated by:
    - ReplServer: adds/removes active connections around each session
    - TaskSpawner: registers session tasks and drops them once done
    - ReplServer.shutdown(): waits for connections and tasks to complete
    """
    connections: set["SocketConnection"] = field(default_factory=set)
    """
    Set of accepted connections whose session is still running.
    """

    tasks: set[asyncio.Task[None]] = field(default_factory=set)
    """
    Set of session tasks and the accept loop task.
    """
