import select
import signal

from daemonkit.signals import SignalHandler


def _wait_readable(handler, timeout=2.0):
    ready, _, _ = select.select([handler.fileno()], [], [], timeout)
    return bool(ready)


def test_sighup_calls_callback():
    calls = []
    with SignalHandler(sighup=lambda: calls.append("hup")) as handler:
        signal.raise_signal(signal.SIGHUP)
        assert _wait_readable(handler)
        assert handler.handle() == signal.SIGHUP
    assert calls == ["hup"]


def test_sigusr1_calls_callback():
    calls = []
    with SignalHandler(sigusr1=lambda: calls.append("usr1")) as handler:
        signal.raise_signal(signal.SIGUSR1)
        assert _wait_readable(handler)
        assert handler.handle() == signal.SIGUSR1
    assert calls == ["usr1"]


def test_sigterm_and_sigint_call_stop():
    calls = []
    with SignalHandler(stop=lambda: calls.append("stop")) as handler:
        signal.raise_signal(signal.SIGTERM)
        assert _wait_readable(handler)
        assert handler.handle() == signal.SIGTERM
        signal.raise_signal(signal.SIGINT)
        assert _wait_readable(handler)
        assert handler.handle() == signal.SIGINT
    assert calls == ["stop", "stop"]


def test_missing_callback_is_ignored():
    with SignalHandler() as handler:
        signal.raise_signal(signal.SIGHUP)
        assert _wait_readable(handler)
        assert handler.handle() == signal.SIGHUP


def test_handle_without_signal_returns_none():
    with SignalHandler() as handler:
        assert handler.handle() is None


def test_sigpipe_ignored_while_installed_and_restored_after_close():
    before_pipe = signal.getsignal(signal.SIGPIPE)
    before_hup = signal.getsignal(signal.SIGHUP)
    handler = SignalHandler()
    assert signal.getsignal(signal.SIGPIPE) == signal.SIG_IGN
    handler.close()
    assert signal.getsignal(signal.SIGPIPE) == before_pipe
    assert signal.getsignal(signal.SIGHUP) == before_hup
    assert handler.fileno() == -1