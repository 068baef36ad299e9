import pytest

from currency_localizer.core.errors import (
    RateLimited,
    RateProviderFailure,
    UnsupportedCurrency,
)

from conftest import VALID_KEY


@pytest.mark.parametrize("code", ["USD", "JPY", "KPW"])
async def test_identity_pair_is_one_without_network(rate_resolver, rates, code):
    record = await rate_resolver.resolve_rate(code, code, VALID_KEY)
    assert record.rate == 1.0
    assert rates.calls == 0
    assert len(rate_resolver.cache) == 0


async def test_cached_pair_within_ttl(rate_resolver, rates, clock):
    first = await rate_resolver.resolve_rate("USD", "EUR", VALID_KEY)
    clock.advance(minutes=30)
    second = await rate_resolver.resolve_rate("USD", "EUR", VALID_KEY)
    assert first == second
    assert rates.calls == 1

    clock.advance(minutes=30)
    await rate_resolver.resolve_rate("USD", "EUR", VALID_KEY)
    assert rates.calls == 2


async def test_pairs_are_ordered(rate_resolver, rates):
    await rate_resolver.resolve_rate("USD", "EUR", VALID_KEY)
    reverse = await rate_resolver.resolve_rate("EUR", "USD", VALID_KEY)
    assert reverse.rate == 1.087
    assert rates.calls == 2


async def test_missing_target_is_unsupported(rate_resolver, rates):
    with pytest.raises(UnsupportedCurrency) as exc:
        await rate_resolver.resolve_rate("USD", "KPW", VALID_KEY)
    assert exc.value.currency == "KPW"
    assert not isinstance(exc.value, RateProviderFailure)
    assert len(rate_resolver.cache) == 0


@pytest.mark.parametrize("bad", [0, -1.0, "0.9", None, True, float("inf"), float("nan")])
async def test_invalid_rate_value_is_provider_failure(rate_resolver, rates, bad):
    rates.tables["USD"]["EUR"] = bad
    with pytest.raises(RateProviderFailure):
        await rate_resolver.resolve_rate("USD", "EUR", VALID_KEY)


async def test_errors_are_not_cached(rate_resolver, rates):
    rates.error = RateLimited(retry_after=30)
    with pytest.raises(RateLimited):
        await rate_resolver.resolve_rate("USD", "EUR", VALID_KEY)
    rates.error = None
    assert (await rate_resolver.resolve_rate("USD", "EUR", VALID_KEY)).rate == 0.92
    assert rates.calls == 2
