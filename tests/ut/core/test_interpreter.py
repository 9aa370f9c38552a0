import json
import math
import pytest
from unittest.mock import Mock

from sockrepl.core.eval.context import EvaluationContext
from sockrepl.core.eval.interpreter import CommandInterpreter
from sockrepl.core.models.message import Response


def encode(obj) -> bytes:
    return json.dumps(obj).encode("utf-8")


@pytest.mark.ut
def test_expression_value(interpreter):
    assert interpreter.interpret(encode({"code": "2+2"})) == Response(value=4)


@pytest.mark.ut
def test_statement_yields_null(interpreter, serializer):
    payload = interpreter.respond(encode({"code": "x = 1"}))

    assert serializer.deserialize(payload) == {"value": None}


@pytest.mark.ut
def test_raised_error_is_captured(interpreter):
    response = interpreter.interpret(encode({"code": "raise RuntimeError('boom')"}))

    assert not response.ok
    assert response.error == "RuntimeError: boom"
    assert response.to_dict() == {"error": "RuntimeError: boom"}


@pytest.mark.ut
def test_syntax_error_is_captured(interpreter):
    response = interpreter.interpret(encode({"code": "def ("}))

    assert "SyntaxError" in response.error


@pytest.mark.ut
@pytest.mark.parametrize("blob", [
    b"{not json",
    b"",
    b"\xff\xfe\x00",
    encode([1, 2, 3]),
    encode({"other": 1}),
    encode({"code": 42}),
])
def test_invalid_requests_become_errors(interpreter, blob):
    response = interpreter.interpret(blob)

    assert isinstance(response.error, str)
    assert response.error


@pytest.mark.ut
def test_missing_code_message(interpreter):
    response = interpreter.interpret(encode({"cmd": "2+2"}))

    assert "'code'" in response.error


@pytest.mark.ut
def test_state_persists_between_requests(interpreter):
    interpreter.interpret(encode({"code": "counter = 10"}))
    interpreter.interpret(encode({"code": "counter += 5"}))

    assert interpreter.interpret(encode({"code": "counter"})).value == 15


@pytest.mark.ut
def test_request_is_published(interpreter, context):
    response = interpreter.interpret(
        encode({"code": "REQUEST['tag']", "tag": "hello"})
    )

    assert response.value == "hello"
    assert context.request == {"code": "REQUEST['tag']", "tag": "hello"}


@pytest.mark.ut
def test_request_published_even_when_code_fails(interpreter, context):
    interpreter.interpret(encode({"code": "1/0", "id": 7}))

    assert context.request["id"] == 7


@pytest.mark.ut
def test_invalid_request_does_not_overwrite_slot(interpreter, context):
    interpreter.interpret(encode({"code": "None", "id": 1}))
    interpreter.interpret(b"garbage")

    assert context.request["id"] == 1


@pytest.mark.ut
def test_system_exit_is_captured(interpreter):
    response = interpreter.interpret(encode({"code": "raise SystemExit(3)"}))

    assert response.error == "SystemExit: 3"


@pytest.mark.ut
def test_traceback_rendering(context, serializer):
    interpreter = CommandInterpreter(context, serializer, with_traceback=True)

    response = interpreter.interpret(encode({"code": "raise ValueError('boom')"}))

    assert response.error.startswith("Traceback (most recent call last):")
    assert response.error.endswith("ValueError: boom")


@pytest.mark.ut
def test_non_json_values_are_rendered(interpreter, serializer):
    code = "class Thing:\n    def __repr__(self):\n        return '<thing>'\nThing()"
    payload = interpreter.respond(encode({"code": code}))

    assert serializer.deserialize(payload) == {"value": "<thing>"}


@pytest.mark.ut
def test_exception_value_is_rendered_as_string(interpreter, serializer):
    payload = interpreter.respond(encode({"code": "KeyError('k')"}))

    assert serializer.deserialize(payload) == {"value": "'k'"}


@pytest.mark.ut
def test_unencodable_value_becomes_error(interpreter, serializer):
    payload = interpreter.respond(encode({"code": "float('nan')"}))

    decoded = serializer.deserialize(payload)
    assert list(decoded) == ["error"]
    assert "ValueError" in decoded["error"]


@pytest.mark.ut
def test_circular_value_becomes_error(interpreter, serializer):
    payload = interpreter.respond(encode({"code": "a = []\na.append(a)\na"}))

    assert "error" in serializer.deserialize(payload)


@pytest.mark.ut
def test_shared_context_between_interpreters(serializer):
    context = EvaluationContext()
    first = CommandInterpreter(context, serializer)
    second = CommandInterpreter(context, serializer)

    first.interpret(encode({"code": "shared = 'yes'"}))

    assert second.interpret(encode({"code": "shared"})).value == "yes"


@pytest.mark.ut
def test_float_values_round_trip(interpreter, serializer):
    payload = interpreter.respond(encode({"code": "import math; math.pi"}))

    assert serializer.deserialize(payload)["value"] == pytest.approx(math.pi)


@pytest.mark.ut
@pytest.mark.parametrize("code, expected", [
    ("raise BaseException('peer')", "BaseException: peer"),
    ("raise GeneratorExit('peer')", "GeneratorExit: peer"),
    ("raise KeyboardInterrupt", "KeyboardInterrupt"),
])
def test_base_exceptions_are_captured(interpreter, code, expected):
    response = interpreter.interpret(encode({"code": code}))

    assert response.error == expected


@pytest.mark.ut
def test_interrupt_while_decoding_is_captured(context):
    serializer = Mock()
    serializer.deserialize.side_effect = KeyboardInterrupt

    response = CommandInterpreter(context, serializer).interpret(b"{}")

    assert response.error == "KeyboardInterrupt"


@pytest.mark.ut
def test_failing_repr_becomes_error(interpreter, serializer):
    code = (
        "class Loud:\n"
        "    def __repr__(self):\n"
        "        raise RuntimeError('no repr')\n"
        "Loud()"
    )
    payload = interpreter.respond(encode({"code": code}))

    assert serializer.deserialize(payload) == {"error": "RuntimeError: no repr"}


@pytest.mark.ut
def test_failing_exception_str_becomes_error(interpreter, serializer):
    code = (
        "class Odd(Exception):\n"
        "    def __str__(self):\n"
        "        raise LookupError('no str')\n"
        "Odd()"
    )
    payload = interpreter.respond(encode({"code": code}))

    assert serializer.deserialize(payload) == {"error": "LookupError: no str"}


@pytest.mark.ut
def test_oversized_response_becomes_error(context, serializer):
    interpreter = CommandInterpreter(context, serializer, max_response_size=64)

    payload = interpreter.respond(encode({"code": "'x' * 1000"}))

    decoded = serializer.deserialize(payload)
    assert list(decoded) == ["error"]
    assert "exceeds limit 64" in decoded["error"]
    assert serializer.deserialize(interpreter.respond(encode({"code": "1"}))) == {"value": 1}
