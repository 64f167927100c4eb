import pytest

from limitbook.callback import BboListener, Callback, CallbackType, FillFlags

ORDER = object()
OTHER = object()


def test_default_callback_is_unknown_and_empty():
    cb = Callback()
    assert cb.type is CallbackType.UNKNOWN
    assert cb.order is None
    assert cb.matched_order is None
    assert (cb.quantity, cb.price, cb.delta) == (0, 0, 0)
    assert cb.flags == FillFlags.NEITHER_FILLED
    assert cb.reject_reason is None


@pytest.mark.parametrize(
    "factory,expected",
    [
        (Callback.accept, CallbackType.ORDER_ACCEPT),
        (Callback.accept_stop, CallbackType.ORDER_ACCEPT_STOP),
        (Callback.trigger_stop, CallbackType.ORDER_TRIGGER_STOP),
        (Callback.cancel_stop, CallbackType.ORDER_CANCEL_STOP),
    ],
)
def test_simple_factories(factory, expected):
    cb = factory(ORDER)
    assert cb.type is expected
    assert cb.order is ORDER
    assert cb.reject_reason is None


@pytest.mark.parametrize(
    "factory,expected",
    [
        (Callback.reject, CallbackType.ORDER_REJECT),
        (Callback.cancel_reject, CallbackType.ORDER_CANCEL_REJECT),
        (Callback.replace_reject, CallbackType.ORDER_REPLACE_REJECT),
    ],
)
def test_reject_factories_keep_reason(factory, expected):
    cb = factory(ORDER, "not found")
    assert cb.type is expected
    assert cb.order is ORDER
    assert cb.reject_reason == "not found"


def test_fill_carries_both_orders():
    flags = FillFlags.INBOUND_FILLED | FillFlags.MATCHED_FILLED
    cb = Callback.fill(ORDER, OTHER, 100, 1250, flags)
    assert cb.type is CallbackType.ORDER_FILL
    assert cb.order is ORDER
    assert cb.matched_order is OTHER
    assert (cb.quantity, cb.price) == (100, 1250)
    assert FillFlags.INBOUND_FILLED in cb.flags
    assert FillFlags.MATCHED_FILLED in cb.flags
    assert FillFlags.BOTH_FILLED not in cb.flags


def test_cancel_keeps_open_quantity():
    cb = Callback.cancel(ORDER, 300)
    assert cb.type is CallbackType.ORDER_CANCEL
    assert cb.quantity == 300


def test_replace_fields():
    cb = Callback.replace(ORDER, 300, -100, 1251)
    assert cb.type is CallbackType.ORDER_REPLACE
    assert cb.order is ORDER
    assert (cb.quantity, cb.delta, cb.price) == (300, -100, 1251)


def test_book_update_ignores_book():
    cb = Callback.book_update(object())
    assert cb.type is CallbackType.BOOK_UPDATE
    assert cb.order is None
    assert Callback.book_update().type is CallbackType.BOOK_UPDATE


@pytest.mark.parametrize(
    "flag,value",
    [
        (FillFlags.NEITHER_FILLED, 0),
        (FillFlags.INBOUND_FILLED, 1),
        (FillFlags.MATCHED_FILLED, 2),
        (FillFlags.BOTH_FILLED, 4),
    ],
)
def test_fill_flag_values(flag, value):
    cb = Callback.fill(ORDER, OTHER, 10, 1250, flag)
    assert int(cb.flags) == value


def test_callback_type_order_starts_with_unknown():
    members = list(CallbackType)
    assert Callback().type is members[0]
    assert Callback.book_update().type is members[-1]


def test_bbo_listener_is_abstract():
    with pytest.raises(TypeError):
        BboListener()


def test_bbo_listener_requires_on_bbo_change():
    incomplete = type("Incomplete", (BboListener,), {})
    with pytest.raises(TypeError):
        incomplete()

    calls = []
    recorder_cls = type(
        "Recorder",
        (BboListener,),
        {"on_bbo_change": lambda self, book, depth: calls.append((book, depth))},
    )
    recorder = recorder_cls()
    assert isinstance(recorder, BboListener)

    depth = Callback.book_update(ORDER)
    recorder.on_bbo_change(ORDER, depth)
    assert len(calls) == 1
    book, received = calls[0]
    assert book is ORDER
    assert received.type is CallbackType.BOOK_UPDATE
    assert received.order is None