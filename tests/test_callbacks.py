from __future__ import annotations

from snapdirs.callbacks import RootDirCallbacks


def test_callbacks_run_in_registration_order() -> None:
    calls: list[tuple[str, str]] = []
    callbacks = RootDirCallbacks()
    callbacks.add(lambda root: calls.append(("a", root)))
    callbacks.add(lambda root: calls.append(("b", root)))

    callbacks.notify("/x")
    assert calls == [("a", "/x"), ("b", "/x")]


def test_same_callback_can_be_registered_twice() -> None:
    roots: list[str] = []
    callbacks = RootDirCallbacks()
    callbacks.add(roots.append)
    callbacks.add(roots.append)

    callbacks.notify("/")
    assert roots == ["/", "/"]
    assert len(callbacks) == 2
