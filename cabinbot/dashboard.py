"""Presentation model for the IFE control panel.

The view is plain data so it can be rendered by any surface. The Discord
rendering lives in ``cabinbot.ui``.
"""

from dataclasses import dataclass

from .i18n import t
from .track import TrackCatalog

SELECT_ID = "ife_select"
TOGGLE_ID = "ife_play_pause"
STOP_ID = "ife_stop"


@dataclass(frozen=True)
class DashboardOption:
    label: str
    description: str
    value: str
    selected: bool = False


@dataclass(frozen=True)
class DashboardControl:
    custom_id: str
    label: str
    emoji: str


@dataclass(frozen=True)
class DashboardView:
    """Rendered playback status plus the available controls."""

    heading: str
    title: str
    description: str
    placeholder: str
    footer: str
    options: tuple[DashboardOption, ...]
    toggle: DashboardControl
    stop: DashboardControl


def build_dashboard(
    catalog: TrackCatalog, active_track_id: str | None, paused: bool
) -> DashboardView:
    """Render the control panel for a playback state.

    Args:
        catalog: The track catalog, listed in catalog order.
        active_track_id: The selected track, or None when idle.
        paused: Whether the active track is paused.

    Returns:
        The dashboard view. Idle shows the empty-state message.
    """
    if active_track_id is None:
        title = t("dashboard.idle_title")
        description = t("dashboard.idle_description")
    else:
        track = catalog.get(active_track_id)
        title = t("dashboard.paused" if paused else "dashboard.now_playing", label=track.label)
        description = track.description

    # Nothing to pause while idle, so the toggle offers Play
    if paused or active_track_id is None:
        toggle = DashboardControl(TOGGLE_ID, t("dashboard.play"), "▶️")
    else:
        toggle = DashboardControl(TOGGLE_ID, t("dashboard.pause"), "⏸️")

    return DashboardView(
        heading=t("dashboard.heading"),
        title=title,
        description=description,
        placeholder=t("dashboard.placeholder"),
        footer=t("dashboard.footer"),
        options=tuple(
            DashboardOption(
                label=track.label,
                description=track.description,
                value=track.id,
                selected=track.id == active_track_id,
            )
            for track in catalog
        ),
        toggle=toggle,
        stop=DashboardControl(STOP_ID, t("dashboard.stop"), "⏹️"),
    )
