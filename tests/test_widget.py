"""Tests for the elevated-access widget publisher."""

from __future__ import annotations

import itertools
from unittest.mock import MagicMock, call

import pytest

from statusbar_policy_core.config import IndicatorResources
from statusbar_policy_core.display import (
    BufferDisplay,
    WidgetPublishCommand,
    WidgetUnpublishCommand,
)
from statusbar_policy_core.errors import DisplayError, PackageNotFoundError
from statusbar_policy_core.widget import (
    SETTINGS_ACTION_TARGET,
    WidgetAction,
    WidgetDecision,
    WidgetPublisher,
    privileged_identity,
    resolve_label,
    widget_should_exist,
)


@pytest.fixture
def identity():
    provider = MagicMock()
    provider.clear_calling_identity.return_value = "caller-token"
    return provider


@pytest.fixture
def publisher(display, sources, identity):
    return WidgetPublisher(
        "elevated-access", display, sources.labels, identity, IndicatorResources()
    )


class TestWidgetShouldExist:
    """Tests for the existence rule."""

    @pytest.mark.parametrize(
        ("has_sessions", "eligible", "primary"),
        list(itertools.product([True, False], repeat=3)),
    )
    def test_all_combinations(self, has_sessions, eligible, primary):
        """Test the widget exists only when all three hold."""
        expected = has_sessions and eligible and primary
        assert widget_should_exist(has_sessions, eligible, primary) is expected


class TestResolveLabel:
    """Tests for resolve_label()."""

    def test_installed_package(self, sources):
        """Test an installed package resolves to its label."""
        assert resolve_label(sources.labels, "com.example.terminal") == "Terminal"

    def test_unknown_package_falls_back_to_id(self, sources):
        """Test a missing package shows its raw identifier."""
        assert resolve_label(sources.labels, "com.example.gone") == "com.example.gone"

    def test_empty_label_falls_back_to_id(self):
        """Test a blank label shows the raw identifier."""
        labels = MagicMock()
        labels.get_application_label.return_value = None
        assert resolve_label(labels, "com.example.x") == "com.example.x"


class TestPrivilegedIdentity:
    """Tests for privileged_identity()."""

    def test_restores_on_success(self, identity):
        """Test the caller identity is restored after the block."""
        with privileged_identity(identity):
            identity.restore_calling_identity.assert_not_called()
        identity.restore_calling_identity.assert_called_once_with("caller-token")

    def test_restores_on_failure(self, identity):
        """Test the caller identity is restored when the block raises."""
        with pytest.raises(DisplayError):
            with privileged_identity(identity):
                raise DisplayError("renderer gone")
        identity.restore_calling_identity.assert_called_once_with("caller-token")


class TestWidgetPublisher:
    """Tests for WidgetPublisher.build() and apply()."""

    def test_build_lists_every_session(self, publisher):
        """Test content lists each package with label and launch action."""
        content = publisher.build(("com.example.terminal", "com.example.gone"), 0)

        assert content.label == "Root access"
        assert content.sensitive is True
        assert content.settings_action == WidgetAction(
            "settings", SETTINGS_ACTION_TARGET
        )
        assert [item.title for item in content.items] == [
            "Terminal",
            "com.example.gone",
        ]
        assert [item.summary for item in content.items] == [
            "com.example.terminal",
            "com.example.gone",
        ]
        assert content.items[0].on_click == WidgetAction(
            "launch", "com.example.terminal"
        )

    def test_publish_runs_under_cleared_identity(self, display, identity, publisher):
        """Test publish happens between clear and restore."""
        events = []
        identity.clear_calling_identity.side_effect = lambda: events.append("clear")
        identity.restore_calling_identity.side_effect = lambda token: events.append(
            "restore"
        )
        real_publish = display.publish_widget
        display.publish_widget = lambda widget_id, content: (
            events.append("publish"),
            real_publish(widget_id, content),
        )

        publisher.apply(WidgetDecision(True, ("com.example.terminal",), 0))

        assert events == ["clear", "publish", "restore"]
        assert publisher.published is True

    def test_publish_failure_restores_identity(self, identity, sources):
        """Test a failed publish still restores the caller identity."""
        display = MagicMock()
        display.publish_widget.side_effect = DisplayError("rejected")
        publisher = WidgetPublisher(
            "elevated-access", display, sources.labels, identity, IndicatorResources()
        )

        with pytest.raises(DisplayError):
            publisher.apply(WidgetDecision(True, ("com.example.terminal",), 0))

        identity.restore_calling_identity.assert_called_once_with("caller-token")
        assert publisher.published is False

    def test_first_absent_decision_unpublishes_once(self, display, publisher):
        """Test the first not-exist decision clears leftovers, later ones do not."""
        publisher.apply(WidgetDecision(False))
        publisher.apply(WidgetDecision(False))

        assert display.widget_commands() == [WidgetUnpublishCommand("elevated-access")]

    def test_publish_then_unpublish(self, display, identity, publisher):
        """Test a published widget is unpublished on the transition."""
        publisher.apply(WidgetDecision(True, ("com.example.terminal",), 0))
        publisher.apply(WidgetDecision(True, ("com.example.terminal",), 0))
        publisher.apply(WidgetDecision(False))

        commands = display.widget_commands()
        assert [type(c) for c in commands] == [
            WidgetPublishCommand,
            WidgetPublishCommand,
            WidgetUnpublishCommand,
        ]
        assert publisher.published is False
        assert identity.restore_calling_identity.call_args_list == [
            call("caller-token")
        ] * 3

    def test_to_dict(self, publisher):
        """Test the wire shape of widget content."""
        data = publisher.build(("com.example.backup",), 0).to_dict()

        assert data["label"] == "Root access"
        assert data["settings_action"] == {
            "kind": "settings",
            "target": SETTINGS_ACTION_TARGET,
        }
        assert data["items"] == [
            {
                "title": "Backup",
                "summary": "com.example.backup",
                "icon": "ic_qs_su",
                "on_click": {"kind": "launch", "target": "com.example.backup"},
            }
        ]
        assert data["user_id"] == 0
        assert data["sensitive"] is True
