"""Tests for desktop notifications."""

import subprocess

import notifier


class TestNotify:
    def test_no_notifier_available(self, monkeypatch):
        monkeypatch.setattr(notifier.shutil, "which", lambda name: None)
        assert notifier.notify("title", "message") is False

    def test_linux_notify_send(self, monkeypatch):
        calls = []
        monkeypatch.setattr(notifier.sys, "platform", "linux")
        monkeypatch.setattr(notifier.shutil, "which", lambda name: f"/usr/bin/{name}")
        monkeypatch.setattr(notifier.subprocess, "run", lambda cmd, **kw: calls.append(cmd))
        assert notifier.notify("a is down.", "Down at now") is True
        assert calls == [["/usr/bin/notify-send", "a is down.", "Down at now"]]

    def test_macos_osascript(self, monkeypatch):
        calls = []
        monkeypatch.setattr(notifier.sys, "platform", "darwin")
        monkeypatch.setattr(notifier.shutil, "which", lambda name: f"/usr/bin/{name}")
        monkeypatch.setattr(notifier.subprocess, "run", lambda cmd, **kw: calls.append(cmd))
        notifier.notify("a is down.", "Down at now")
        assert calls[0][0] == "/usr/bin/osascript"
        assert 'with title "a is down."' in calls[0][2]

    def test_failure_is_logged_not_raised(self, monkeypatch, caplog):
        def failing(cmd, **kw):
            raise subprocess.CalledProcessError(1, cmd)

        monkeypatch.setattr(notifier.sys, "platform", "linux")
        monkeypatch.setattr(notifier.shutil, "which", lambda name: "/usr/bin/notify-send")
        monkeypatch.setattr(notifier.subprocess, "run", failing)
        assert notifier.notify("t", "m") is False
        assert "Notification failed" in caplog.text

    def test_osascript_escapes_quotes(self, monkeypatch):
        calls = []
        monkeypatch.setattr(notifier.sys, "platform", "darwin")
        monkeypatch.setattr(notifier.shutil, "which", lambda name: f"/usr/bin/{name}")
        monkeypatch.setattr(notifier.subprocess, "run", lambda cmd, **kw: calls.append(cmd))
        notifier.notify('http://a.example/?q="x"\\y is down.', "Down at now")
        script = calls[0][2]
        assert 'with title "http://a.example/?q=\\"x\\"\\\\y is down."' in script
