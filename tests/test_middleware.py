"""
Tests for the middleware stack
"""
import pytest

from flowchat.application.pipeline.middleware import Middleware, MiddlewareStack
from flowchat.domain.errors import ConfigurationError, FlowContractError


def _recorder(calls, label):
    def stage(context, call_next):
        calls.append(f"{label}:in")
        result = call_next(context)
        calls.append(f"{label}:out")
        return result
    return stage


def _endpoint(calls):
    def endpoint(context):
        calls.append("endpoint")
        return "response"
    return endpoint


class TaggingMiddleware(Middleware):
    def dispatch(self, context, call_next):
        context["tag"] = self.options["tag"]
        return call_next(context)


def test_first_stage_runs_outermost(make_context):
    calls = []
    stack = MiddlewareStack().use("a", _recorder(calls, "a")).use("b", _recorder(calls, "b"))

    result = stack.build(_endpoint(calls))(make_context())

    assert result == "response"
    assert calls == ["a:in", "b:in", "endpoint", "b:out", "a:out"]


def test_insert_before_and_after():
    stack = MiddlewareStack()
    stack.use("gateway", Middleware).use("session", Middleware).use("pagination", Middleware)

    stack.insert_before("session", "auth", Middleware)
    stack.insert_after("pagination", "audit", Middleware)

    assert stack.names == ["gateway", "auth", "session", "pagination", "audit"]
    assert "auth" in stack
    assert len(stack) == 5


def test_unknown_target_is_rejected():
    stack = MiddlewareStack().use("session", Middleware)

    with pytest.raises(ConfigurationError):
        stack.insert_before("missing", "auth", Middleware)


def test_duplicate_stage_name_is_rejected():
    stack = MiddlewareStack().use("session", Middleware)

    with pytest.raises(ConfigurationError):
        stack.use("session", Middleware)


def test_stage_can_short_circuit(make_context):
    calls = []

    def deny(context, call_next):
        return "denied"

    stack = MiddlewareStack().use("auth", deny).use("after", _recorder(calls, "after"))

    assert stack.build(_endpoint(calls))(make_context()) == "denied"
    assert calls == []


def test_stage_can_transform_result(make_context):
    stack = MiddlewareStack().use("upper", lambda context, call_next: call_next(context).upper())

    assert stack.build(lambda context: "response")(make_context()) == "RESPONSE"


def test_calling_rest_of_pipeline_twice_is_fatal(make_context):
    def greedy(context, call_next):
        call_next(context)
        return call_next(context)

    handler = MiddlewareStack().use("greedy", greedy).build(lambda context: "response")

    with pytest.raises(FlowContractError):
        handler(make_context())


def test_middleware_class_receives_options(make_context):
    context = make_context()
    handler = MiddlewareStack().use("tagger", TaggingMiddleware, tag="vip").build(lambda ctx: ctx["tag"])

    assert handler(context) == "vip"
    assert "tag" in context


def test_nested_stack_runs_in_place(make_context):
    calls = []
    inner = MiddlewareStack("inner").use("i1", _recorder(calls, "i1"))
    outer = MiddlewareStack().use("o1", _recorder(calls, "o1")).use("inner", inner).use("o2", _recorder(calls, "o2"))

    outer.build(_endpoint(calls))(make_context())

    assert calls == ["o1:in", "i1:in", "o2:in", "endpoint", "o2:out", "i1:out", "o1:out"]


def test_replace_and_configure_keep_position(make_context):
    stack = MiddlewareStack().use("first", Middleware).use("tagger", TaggingMiddleware, tag="a")

    stack.configure("tagger", tag="b")
    assert stack.build(lambda ctx: ctx["tag"])(make_context()) == "b"

    stack.replace("first", lambda context, call_next: "replaced")
    assert stack.names == ["first", "tagger"]
    assert stack.build(lambda ctx: ctx["tag"])(make_context()) == "replaced"


def test_remove_stage():
    stack = MiddlewareStack().use("a", Middleware).use("b", Middleware)
    stack.remove("a")
    assert stack.names == ["b"]


def test_non_callable_stage_is_rejected():
    stack = MiddlewareStack().use("broken", 42)

    with pytest.raises(ConfigurationError):
        stack.build(lambda context: None)
