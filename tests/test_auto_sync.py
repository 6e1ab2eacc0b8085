import logging

from application.auto_sync import AutoSync
from core.task_id import LocalId, RemoteId
from infrastructure.connectivity import ConnectivityWatcher


class FakeNetwork:
    def __init__(self):
        self.callbacks = []

    def is_online(self):
        return True

    def subscribe(self, callback):
        self.callbacks.append(callback)

        def unsubscribe():
            self.callbacks.remove(callback)

        return unsubscribe

    def emit(self, online):
        for callback in list(self.callbacks):
            callback(online)


def _offline_task(env, title="Buy milk"):
    env.go_offline()
    task = env.engine.add_task("u1", title)
    assert isinstance(task.id, LocalId)
    env.go_online()
    return task


def test_reconnect_replays_pending_work(env):
    _offline_task(env)
    network = FakeNetwork()
    auto = AutoSync(env.engine, network, env.auth)
    auto.attach()

    network.emit(True)

    cached = env.cache.load("u1")
    assert [t.id for t in cached] == [RemoteId("r1")]
    assert not cached[0].pending_sync


def test_going_offline_does_nothing(env):
    _offline_task(env)
    network = FakeNetwork()
    AutoSync(env.engine, network, env.auth).attach()

    network.emit(False)

    assert env.remote.calls == []


def test_disabled_or_signed_out_skips_sync(env):
    _offline_task(env)
    network = FakeNetwork()
    AutoSync(env.engine, network, env.auth, enabled=lambda: False).attach()
    network.emit(True)
    assert env.remote.calls == []

    network = FakeNetwork()
    env.auth.user_id = None
    AutoSync(env.engine, network, env.auth).attach()
    network.emit(True)
    assert env.remote.calls == []


def test_attach_is_idempotent_and_detach_unsubscribes(env):
    network = FakeNetwork()
    auto = AutoSync(env.engine, network, env.auth)

    auto.attach()
    auto.attach()
    assert auto.attached
    assert len(network.callbacks) == 1

    auto.detach()
    auto.detach()
    assert not auto.attached
    assert network.callbacks == []


def test_failures_are_logged_not_raised(env, caplog):
    _offline_task(env)
    env.remote.fail_ops.add("create")
    network = FakeNetwork()
    AutoSync(env.engine, network, env.auth).attach()

    with caplog.at_level(logging.WARNING, logger="todo_sync.autosync"):
        network.emit(True)

    assert "Auto-sync left 1 task(s) pending" in caplog.text
    assert env.cache.load("u1")[0].pending_sync


def test_engine_crash_is_contained(env, caplog):
    network = FakeNetwork()

    def crash(user_id):
        raise RuntimeError("boom")

    env.engine.sync_pending_changes = crash
    AutoSync(env.engine, network, env.auth).attach()

    with caplog.at_level(logging.WARNING, logger="todo_sync.autosync"):
        network.emit(True)

    assert "Auto-sync failed: boom" in caplog.text


class SequenceOracle:
    def __init__(self, states):
        self.states = list(states)

    def is_online(self):
        return self.states.pop(0)


def test_watcher_transition_drives_replay(env):
    _offline_task(env)
    watcher = ConnectivityWatcher(SequenceOracle([False, True]))
    AutoSync(env.engine, watcher, env.auth).attach()

    watcher.poll()
    assert env.cache.load("u1")[0].pending_sync

    watcher.poll()
    assert [t.id for t in env.cache.load("u1")] == [RemoteId("r1")]
