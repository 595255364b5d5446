from __future__ import annotations

from typing import Optional

from .base import Event, Widget


class GridFlashWidget(Widget):
    """Message box of an edit widget, filled by the ``flash`` event."""

    template_name = "grid_widget/flash/wrapper.html"

    def after_add(self, parent: Widget) -> None:
        # only the owning edit widget's own flashes land here
        parent.respond_to_event("flash", on=self.name, from_=parent.name)
        parent.respond_to_event("flash_deveal", on=self.name, from_=parent.name)

    @property
    def dom_id(self) -> str:
        return self.parent.dom_id

    @property
    def flash_id(self) -> str:
        return f"{self.dom_id}_flash"

    def display(self, evt: Optional[Event] = None) -> str:
        return self.render(flash_id=self.flash_id)

    def flash(self, evt: Optional[Event] = None) -> str:
        """Fill the box with the event's notice and alert, then reveal it."""
        notice = evt.get("notice", "") if evt else ""
        alert = evt.get("alert", "") if evt else ""
        html = self.render("grid_widget/flash/content.html", notice=notice, alert=alert)
        return self.update(f"#{self.flash_id}", html) + self.render(
            "grid_widget/flash/effect.js", flash_id=self.flash_id
        )

    def flash_deveal(self, evt: Optional[Event] = None) -> str:
        return self.render("grid_widget/flash/deveal.js", flash_id=self.flash_id)
