import logging
import traceback

from sockrepl.core.eval.context import EvaluationContext
from sockrepl.core.models.message import Request, Response
from sockrepl.core.ports.serializer import Serializer
from sockrepl.core.transport.codec import MAX_BLOB_LENGTH


class CommandInterpreter:
    """
    Turns one request blob into one response blob.

    The interpreter decodes the payload, validates that it carries a string
    `code` field, publishes the request into the shared EvaluationContext,
    executes the code and captures either its value or the exception it
    raised. Every failure at this level is captured into an error response,
    from a payload that is not UTF-8 to a KeyboardInterrupt raised by the
    submitted code, and so is a result that cannot be encoded or framed.
    Nothing raised here ever reaches the session loop.

    Errors are rendered as `"<ExceptionType>: <message>"`, or as the full
    formatted traceback when `with_traceback` is enabled.
    """
    def __init__(
        self,
        context: EvaluationContext,
        serializer: Serializer,
        with_traceback: bool = False,
        max_response_size: int = MAX_BLOB_LENGTH,
    ) -> None:
        self._context = context
        self._serializer = serializer
        self._with_traceback = with_traceback
        self._max_response_size = max_response_size
        self._logger = logging.getLogger("core.eval.interpreter")

    @property
    def context(self) -> EvaluationContext:
        return self._context

    def interpret(self, blob: bytes) -> Response:
        try:
            request = Request.from_dict(self._serializer.deserialize(blob))
        except BaseException as exc:
            self._logger.debug(f"Rejected request: {exc!r}")
            return Response.failure(self.render_error(exc))

        self._context.publish(request.fields)

        try:
            value = self._context.evaluate(request.code)
        except BaseException as exc:
            return Response.failure(self.render_error(exc))

        return Response.success(value)

    def respond(self, blob: bytes) -> bytes:
        """Interpret `blob` and encode the response, falling back to an error."""
        response = self.interpret(blob)
        try:
            payload = self._serializer.serialize(response.to_dict())
        except BaseException as exc:
            return self._encode_failure(exc)

        if len(payload) > self._max_response_size:
            return self._encode_failure(ValueError(
                f"Response of {len(payload)} bytes exceeds limit "
                f"{self._max_response_size}"
            ))

        return payload

    def render_error(self, exc: BaseException) -> str:
        if self._with_traceback:
            lines = traceback.format_exception(exc)
        else:
            lines = traceback.format_exception_only(exc)
        return "".join(lines).rstrip()

    def _encode_failure(self, exc: BaseException) -> bytes:
        fallback = Response.failure(self.render_error(exc))
        return self._serializer.serialize(fallback.to_dict())
