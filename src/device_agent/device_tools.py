"""Built-in tools: clock plus device actions delegated to a host controller."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol

from pydantic import Field

from .models import ToolResult
from .tools import BaseTool, NoArgs, ToolArgs, ToolCatalog, ToolCatalogBuilder


class DeviceController(Protocol):
    """Device automation backend supplied by the host (e.g. an accessibility service)."""

    def home(self) -> None: ...

    def start_app(self, app_name: str) -> None: ...

    def tap(self, x: int, y: int) -> None: ...

    def swipe(self, start_x: int, start_y: int, end_x: int, end_y: int, duration_ms: int) -> None: ...

    def enter_text(self, text: str, submit: bool) -> None: ...

    def get_ui_hierarchy(self) -> str: ...


class GetTimeTool(BaseTool):
    """Returns current UTC time as ISO string."""

    @property
    def name(self) -> str:
        return "get_time"

    @property
    def description(self) -> str:
        return "Get the current UTC date and time in ISO format."

    async def execute(self, args: NoArgs) -> ToolResult:
        now = datetime.now(timezone.utc).isoformat()
        return ToolResult(success=True, content=now)


class StartAppArgs(ToolArgs):
    app_name: str = Field(description="Name or package of the app to open")


class TapArgs(ToolArgs):
    x: int = Field(description="X coordinate in screen pixels")
    y: int = Field(description="Y coordinate in screen pixels")


class SwipeArgs(ToolArgs):
    start_x: int = Field(description="Start X coordinate")
    start_y: int = Field(description="Start Y coordinate")
    end_x: int = Field(description="End X coordinate")
    end_y: int = Field(description="End Y coordinate")
    duration: int = Field(default=300, description="Swipe duration in milliseconds (default 300)")


class EnterTextArgs(ToolArgs):
    text: str = Field(description="Text to type into the focused field")
    submit: bool = Field(default=False, description="Press enter after typing (default false)")


def build_device_catalog(device: DeviceController) -> ToolCatalog:
    """Catalog with get_time and the device actions bound to ``device``."""
    builder = ToolCatalogBuilder().add(GetTimeTool())

    @builder.tool("home", "Go to the device home screen.")
    def home(args: NoArgs) -> str:
        device.home()
        return "Pressed home"

    @builder.tool("start_app", "Open an installed app by name.", StartAppArgs)
    def start_app(args: StartAppArgs) -> str:
        device.start_app(args.app_name)
        return f"Started {args.app_name}"

    @builder.tool("tap", "Tap the screen at the given coordinates.", TapArgs)
    def tap(args: TapArgs) -> str:
        device.tap(args.x, args.y)
        return f"Tapped ({args.x}, {args.y})"

    @builder.tool("swipe", "Swipe between two points on the screen.", SwipeArgs)
    def swipe(args: SwipeArgs) -> str:
        device.swipe(args.start_x, args.start_y, args.end_x, args.end_y, args.duration)
        return f"Swiped from ({args.start_x}, {args.start_y}) to ({args.end_x}, {args.end_y})"

    @builder.tool("enter_text", "Type text into the currently focused input field.", EnterTextArgs)
    def enter_text(args: EnterTextArgs) -> str:
        device.enter_text(args.text, args.submit)
        return "Entered text" + (" and submitted" if args.submit else "")

    @builder.tool("get_ui_hierarchy", "Describe the UI elements currently on screen.")
    def get_ui_hierarchy(args: NoArgs) -> str:
        return device.get_ui_hierarchy()

    return builder.build()
