"""Tests for kiln.routes.params — parameter source classification and resolution."""

from __future__ import annotations

import asyncio
import typing

import pytest

from kiln._errors import ConfigError, ParamResolutionError
from kiln._types import ParamProducer, ParamSet, RoutePattern
from kiln.routes.params import (
    AsyncProducer,
    LiteralParams,
    ResolvedParams,
    SyncProducer,
    classify_source,
    resolve_params,
)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


class TestClassifySource:
    """classify_source — tagged variant built once per source."""

    def test_list_is_literal(self) -> None:
        source = classify_source("/u/:id", [{"id": "1"}])
        assert source == LiteralParams(({"id": "1"},))

    def test_none_is_empty_literal(self) -> None:
        assert classify_source("/u/:id", None) == LiteralParams(())

    def test_false_is_empty_literal(self) -> None:
        assert classify_source("/u/:id", False) == LiteralParams(())

    def test_plain_function_is_sync_producer(self) -> None:
        def produce() -> list[dict[str, str]]:
            return []

        assert isinstance(classify_source("/u/:id", produce), SyncProducer)

    def test_coroutine_function_is_async_producer(self) -> None:
        async def produce() -> list[dict[str, str]]:
            return []

        assert isinstance(classify_source("/u/:id", produce), AsyncProducer)

    def test_unsupported_shape(self) -> None:
        with pytest.raises(ConfigError, match="/u/:id"):
            classify_source("/u/:id", 42)

    def test_non_mapping_item(self) -> None:
        with pytest.raises(ConfigError, match=r"\[1\]"):
            classify_source("/u/:id", [{"id": "1"}, "2"])


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class TestResolveParams:
    """resolve_params — concurrent, fail-fast resolution."""

    @pytest.mark.asyncio
    async def test_literal_used_as_is(self) -> None:
        resolved = await resolve_params({"/u/:id": [{"id": "1"}, {"id": "2"}]})
        assert resolved["/u/:id"] == ({"id": "1"}, {"id": "2"})

    @pytest.mark.asyncio
    async def test_sync_producer(self) -> None:
        calls: list[int] = []

        def produce() -> list[dict[str, str]]:
            calls.append(1)
            return [{"slug": "a"}]

        resolved = await resolve_params({"/b/:slug": produce})
        assert resolved["/b/:slug"] == ({"slug": "a"},)
        assert calls == [1]

    @pytest.mark.asyncio
    async def test_async_producer(self) -> None:
        async def produce() -> list[dict[str, str]]:
            await asyncio.sleep(0)
            return [{"slug": "x"}, {"slug": "y"}]

        resolved = await resolve_params({"/b/:slug": produce})
        assert [p["slug"] for p in resolved["/b/:slug"]] == ["x", "y"]

    @pytest.mark.asyncio
    async def test_sync_producer_returning_awaitable(self) -> None:
        async def fetch() -> list[dict[str, str]]:
            return [{"id": "9"}]

        def produce():
            return fetch()

        resolved = await resolve_params({"/u/:id": produce})
        assert resolved["/u/:id"] == ({"id": "9"},)

    @pytest.mark.asyncio
    async def test_producer_returning_none_skips(self) -> None:
        resolved = await resolve_params({"/u/:id": lambda: None})
        assert resolved["/u/:id"] == ()

    @pytest.mark.asyncio
    async def test_result_is_read_only(self) -> None:
        resolved = await resolve_params({"/u/:id": []})
        with pytest.raises(TypeError):
            resolved["/other"] = ()  # type: ignore[index]

    @pytest.mark.asyncio
    async def test_sources_not_mutated(self) -> None:
        async def produce() -> list[dict[str, str]]:
            return [{"id": "1"}]

        sources = {"/u/:id": produce}
        await resolve_params(sources)
        assert sources["/u/:id"] is produce

    @pytest.mark.asyncio
    async def test_producers_run_concurrently(self) -> None:
        a_started = asyncio.Event()
        b_started = asyncio.Event()

        async def produce_a() -> list[dict[str, str]]:
            a_started.set()
            await b_started.wait()
            return [{"id": "a"}]

        async def produce_b() -> list[dict[str, str]]:
            b_started.set()
            await a_started.wait()
            return [{"id": "b"}]

        resolved = await asyncio.wait_for(
            resolve_params({"/a/:id": produce_a, "/b/:id": produce_b}),
            timeout=5,
        )
        assert resolved["/a/:id"] == ({"id": "a"},)
        assert resolved["/b/:id"] == ({"id": "b"},)

    @pytest.mark.asyncio
    async def test_producer_error_names_route(self) -> None:
        def produce() -> list[dict[str, str]]:
            msg = "database down"
            raise RuntimeError(msg)

        with pytest.raises(ParamResolutionError, match="/u/:id") as exc_info:
            await resolve_params({"/u/:id": produce})

        assert exc_info.value.route == "/u/:id"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    @pytest.mark.asyncio
    async def test_first_failure_cancels_other_producers(self) -> None:
        never = asyncio.Event()

        async def hang() -> list[dict[str, str]]:
            await never.wait()
            return []

        async def fail() -> list[dict[str, str]]:
            msg = "bad"
            raise ValueError(msg)

        with pytest.raises(ParamResolutionError) as exc_info:
            await asyncio.wait_for(
                resolve_params({"/slow/:id": hang, "/bad/:id": fail}),
                timeout=5,
            )
        assert exc_info.value.route == "/bad/:id"

    @pytest.mark.asyncio
    async def test_producer_returning_string_rejected(self) -> None:
        with pytest.raises(ParamResolutionError, match="list of parameter objects"):
            await resolve_params({"/u/:id": lambda: "1,2,3"})

    @pytest.mark.asyncio
    async def test_producer_returning_non_mappings_rejected(self) -> None:
        with pytest.raises(ParamResolutionError) as exc_info:
            await resolve_params({"/u/:id": lambda: ["1", "2"]})
        assert exc_info.value.route == "/u/:id"

    @pytest.mark.asyncio
    async def test_param_resolution_error_is_config_error(self) -> None:
        with pytest.raises(ConfigError):
            await resolve_params({"/u/:id": lambda: 5})


class TestParamTypes:
    """Resolved parameters are described with the shared route type aliases."""

    def test_resolved_params_keys_and_values(self) -> None:
        key, value = typing.get_args(ResolvedParams.__value__)
        assert key is RoutePattern
        assert typing.get_args(value) == (ParamSet, Ellipsis)

    def test_literal_params_field(self) -> None:
        hints = typing.get_type_hints(LiteralParams)
        assert hints["values"] == tuple[ParamSet, ...]

    def test_sync_producer_field(self) -> None:
        assert typing.get_type_hints(SyncProducer)["func"] is ParamProducer
