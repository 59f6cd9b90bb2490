"""Unit tests for tool declaration, argument decoding and the catalog."""
from __future__ import annotations

import asyncio
import unittest
from typing import Optional

from pydantic import Field

from src.device_agent.errors import ArgumentDecodeError, ToolExecutionError, UnknownTool
from src.device_agent.models import ToolResult
from src.device_agent.tools import (
    BaseTool,
    FunctionTool,
    NoArgs,
    ParameterDef,
    ToolArgs,
    ToolCatalog,
    ToolCatalogBuilder,
    parameters_for,
)


class WeatherArgs(ToolArgs):
    location: str = Field(description="City name")
    units: str = Field(default="celsius", description="Temperature units")
    days: int = Field(default=1, description="Forecast days")
    detailed: bool = Field(default=False, description="Include hourly data")
    region: Optional[str] = Field(default=None, description="Optional region")


class WeatherTool(BaseTool):
    args_model = WeatherArgs

    def __init__(self) -> None:
        self.calls: list[WeatherArgs] = []

    @property
    def name(self) -> str:
        return "get_weather"

    @property
    def description(self) -> str:
        return "Get the weather for a city."

    async def execute(self, args: WeatherArgs) -> ToolResult:
        self.calls.append(args)
        return ToolResult(success=True, content=f"Sunny in {args.location} ({args.units})")


class FailingTool(BaseTool):
    @property
    def name(self) -> str:
        return "broken"

    @property
    def description(self) -> str:
        return "Always fails."

    async def execute(self, args: NoArgs) -> ToolResult:
        raise RuntimeError("device unavailable")


class TestParameters(unittest.TestCase):
    def test_parameters_follow_declaration_order(self) -> None:
        params = parameters_for(WeatherArgs)
        self.assertEqual([p.name for p in params], ["location", "units", "days", "detailed", "region"])
        self.assertEqual(params[0], ParameterDef("location", "string", "City name", True))
        self.assertEqual(params[2].type, "integer")
        self.assertEqual(params[3].type, "boolean")
        self.assertEqual(params[4].type, "string")
        self.assertFalse(params[1].required)

    def test_no_args(self) -> None:
        self.assertEqual(parameters_for(NoArgs), [])

    def test_unsupported_type_rejected_at_registration(self) -> None:
        class BadArgs(ToolArgs):
            value: float

        with self.assertRaises(TypeError):
            FunctionTool("bad", "bad", lambda args: None, BadArgs)


class TestDecodeArguments(unittest.TestCase):
    def setUp(self) -> None:
        self.tool = WeatherTool()

    def test_defaults_are_applied(self) -> None:
        args = self.tool.decode_arguments('{"location": "Paris"}')
        self.assertEqual(args.location, "Paris")
        self.assertEqual(args.units, "celsius")
        self.assertEqual(args.days, 1)
        self.assertFalse(args.detailed)

    def test_unknown_keys_are_ignored(self) -> None:
        args = self.tool.decode_arguments('{"location": "Oslo", "extra": 1}')
        self.assertEqual(args.location, "Oslo")

    def test_missing_required_field(self) -> None:
        with self.assertRaises(ArgumentDecodeError) as ctx:
            self.tool.decode_arguments('{"units": "kelvin"}')
        self.assertIn("location", str(ctx.exception))

    def test_invalid_json(self) -> None:
        with self.assertRaises(ArgumentDecodeError):
            self.tool.decode_arguments("{location: Paris")

    def test_non_object(self) -> None:
        with self.assertRaises(ArgumentDecodeError):
            self.tool.decode_arguments('["Paris"]')

    def test_wrong_type(self) -> None:
        with self.assertRaises(ArgumentDecodeError):
            self.tool.decode_arguments('{"location": "Paris", "days": "many"}')

    def test_empty_arguments_for_no_args_tool(self) -> None:
        self.assertIsInstance(FailingTool().decode_arguments(""), NoArgs)
        self.assertIsInstance(FailingTool().decode_arguments(None), NoArgs)


class TestToolCatalog(unittest.IsolatedAsyncioTestCase):
    def test_duplicate_names_rejected(self) -> None:
        with self.assertRaises(ValueError):
            ToolCatalog([WeatherTool(), WeatherTool()])

    def test_lookup(self) -> None:
        catalog = ToolCatalog([WeatherTool(), FailingTool()])
        self.assertEqual(len(catalog), 2)
        self.assertEqual(catalog.names, ["get_weather", "broken"])
        self.assertIn("get_weather", catalog)
        self.assertNotIn("missing", catalog)
        self.assertIsNone(catalog.get("missing"))
        self.assertEqual([t.name for t in catalog], ["get_weather", "broken"])

    async def test_execute_decodes_and_runs(self) -> None:
        tool = WeatherTool()
        catalog = ToolCatalog([tool])
        result = await catalog.execute("get_weather", '{"location": "Rome", "units": "kelvin"}')
        self.assertTrue(result.success)
        self.assertEqual(result.content, "Sunny in Rome (kelvin)")
        self.assertEqual(tool.calls[0].units, "kelvin")

    async def test_execute_unknown_tool(self) -> None:
        with self.assertRaises(UnknownTool) as ctx:
            await ToolCatalog().execute("nope", "{}")
        self.assertEqual(ctx.exception.name, "nope")

    async def test_execute_bad_arguments_does_not_run_tool(self) -> None:
        tool = WeatherTool()
        with self.assertRaises(ArgumentDecodeError):
            await ToolCatalog([tool]).execute("get_weather", "{}")
        self.assertEqual(tool.calls, [])

    async def test_execute_wraps_host_failure(self) -> None:
        with self.assertRaises(ToolExecutionError) as ctx:
            await ToolCatalog([FailingTool()]).execute("broken", "{}")
        self.assertIsInstance(ctx.exception.__cause__, RuntimeError)
        self.assertIn("device unavailable", str(ctx.exception))

    async def test_execute_propagates_cancellation(self) -> None:
        class SlowTool(FailingTool):
            async def execute(self, args: NoArgs) -> ToolResult:
                raise asyncio.CancelledError()

        with self.assertRaises(asyncio.CancelledError):
            await ToolCatalog([SlowTool()]).execute("broken", "{}")


class TestBuilder(unittest.IsolatedAsyncioTestCase):
    async def test_builder_registers_sync_and_async_functions(self) -> None:
        builder = ToolCatalog.builder()

        @builder.tool("echo", "Echo the text back.", WeatherArgs)
        def echo(args: WeatherArgs) -> str:
            return args.location

        async def ping(args: NoArgs) -> ToolResult:
            return ToolResult(success=False, error="offline")

        builder.add_function("ping", "Ping the device.", ping)
        catalog = builder.build()

        self.assertEqual(catalog.names, ["echo", "ping"])
        echoed = await catalog.execute("echo", '{"location": "Lima"}')
        self.assertEqual(echoed.as_text(), "Lima")
        pinged = await catalog.execute("ping", None)
        self.assertFalse(pinged.success)
        self.assertEqual(pinged.as_text(), "Error: offline")

    async def test_none_result_becomes_empty_text(self) -> None:
        catalog = ToolCatalogBuilder().add_function("noop", "Do nothing.", lambda args: None).build()
        result = await catalog.execute("noop", "{}")
        self.assertTrue(result.success)
        self.assertEqual(result.content, "")


if __name__ == "__main__":
    unittest.main()
