"""Tests for the trust policy arithmetic."""

import math

import pytest

from modwarden.configuration.trust_settings import TrustConfig
from modwarden.datatypes.trust_datatypes import InfractionKind, TrustTier
from modwarden.moderation.trust_policy import (
    DAY_MS,
    DAY_SECONDS,
    MAX_MUTE_MS,
    MIN_MUTE_MS,
    TrustPolicy,
    clamp_mute_duration,
)


@pytest.fixture
def policy() -> TrustPolicy:
    return TrustPolicy(TrustConfig())


@pytest.fixture
def disabled_policy() -> TrustPolicy:
    return TrustPolicy(TrustConfig(enabled=False))


class TestClassify:

    @pytest.mark.parametrize(
        "trust, tier",
        [
            (0, TrustTier.HIGH_RISK),
            (10, TrustTier.HIGH_RISK),
            (10.5, TrustTier.NEUTRAL),
            (30, TrustTier.NEUTRAL),
            (59.9, TrustTier.NEUTRAL),
            (60, TrustTier.LOW_RISK),
            (100, TrustTier.LOW_RISK),
        ],
    )
    def test_thresholds_are_inclusive(self, policy, trust, tier):
        assert policy.classify(trust) is tier

    @pytest.mark.parametrize("bad", [None, math.nan, math.inf, -math.inf, "high", True])
    def test_non_finite_trust_reads_as_base(self, policy, bad):
        assert policy.normalize(bad) == 30
        assert policy.classify(bad) is TrustTier.NEUTRAL

    def test_disabled_is_not_applicable(self, disabled_policy):
        assert disabled_policy.classify(0) is TrustTier.NOT_APPLICABLE
        assert disabled_policy.trust_label(0) == "N/A"

    def test_labels(self, policy):
        assert policy.trust_label(5) == "High risk"
        assert policy.trust_label(30) == "Medium risk"
        assert policy.trust_label(80) == "Low risk"


class TestEffectiveMaxWarnings:

    def test_high_risk_loses_one_warning(self, policy):
        assert policy.effective_max_warnings(3, 5) == 2

    def test_neutral_and_low_risk_unchanged(self, policy):
        assert policy.effective_max_warnings(3, 30) == 3
        assert policy.effective_max_warnings(3, 90) == 3

    def test_never_below_one(self):
        policy = TrustPolicy(TrustConfig(low_trust_warnings_penalty=10))
        assert policy.effective_max_warnings(3, 0) == 1
        assert policy.effective_max_warnings(1, 0) == 1

    def test_non_positive_penalty_ignored(self):
        policy = TrustPolicy(TrustConfig(low_trust_warnings_penalty=-2))
        assert policy.effective_max_warnings(3, 0) == 3

    def test_disabled_returns_base(self, disabled_policy):
        assert disabled_policy.effective_max_warnings(3, 0) == 3

    def test_fractional_penalty_is_kept(self):
        policy = TrustPolicy(TrustConfig.from_mapping({"lowTrustWarningsPenalty": 1.5}))
        assert policy.effective_max_warnings(3, 0) == 1.5


class TestEffectiveMaxMessages:

    def test_high_risk_penalty_floored(self, policy):
        assert policy.effective_max_messages(5, 5) == 4
        assert policy.effective_max_messages(1, 5) == 1

    def test_bonus_only_when_positive(self, policy):
        assert policy.effective_max_messages(5, 90) == 5

        bonus_policy = TrustPolicy(TrustConfig(high_trust_messages_bonus=2))
        assert bonus_policy.effective_max_messages(5, 90) == 7
        assert bonus_policy.effective_max_messages(5, 30) == 5

    def test_negative_bonus_ignored(self):
        policy = TrustPolicy(TrustConfig(high_trust_messages_bonus=-3))
        assert policy.effective_max_messages(5, 90) == 5

    def test_disabled_returns_base(self, disabled_policy):
        assert disabled_policy.effective_max_messages(5, 0) == 5


class TestEffectiveMuteDuration:

    def test_high_risk_scaled_up(self, policy):
        assert policy.effective_mute_duration(60_000, 5) == 90_000

    def test_low_risk_scaled_down(self, policy):
        assert policy.effective_mute_duration(60_000, 80) == 48_000

    def test_neutral_unchanged(self, policy):
        assert policy.effective_mute_duration(60_000, 30) == 60_000

    def test_rounds_half_up(self):
        policy = TrustPolicy(TrustConfig(low_trust_mute_multiplier=1.5))
        assert policy.effective_mute_duration(60_001, 0) == 90_002
        assert policy.effective_mute_duration(60_003, 0) == 90_005

    def test_clamped_to_range(self, policy):
        assert policy.effective_mute_duration(1_000, 30) == MIN_MUTE_MS
        assert policy.effective_mute_duration(27 * DAY_MS, 5) == MAX_MUTE_MS

    def test_clamp_applies_when_disabled(self, disabled_policy):
        assert disabled_policy.effective_mute_duration(1_000, 30) == MIN_MUTE_MS
        assert disabled_policy.effective_mute_duration(60 * DAY_MS, 30) == MAX_MUTE_MS
        assert disabled_policy.effective_mute_duration(60_000, 0) == 60_000

    @pytest.mark.parametrize("bad", [math.nan, math.inf, None])
    def test_non_finite_base_gives_minimum(self, policy, bad):
        assert policy.effective_mute_duration(bad, 30) == MIN_MUTE_MS

    def test_overflowing_multiplier_gives_minimum(self):
        policy = TrustPolicy(TrustConfig.from_mapping({"lowTrustMuteMultiplier": 1e305}))
        assert policy.effective_mute_duration(600_000, 5) == MIN_MUTE_MS

    def test_huge_base_gives_minimum(self, policy):
        assert policy.effective_mute_duration(10**400, 30) == MIN_MUTE_MS

    @pytest.mark.parametrize("bad", [math.nan, math.inf, 10**400])
    def test_direct_config_with_bad_multiplier(self, bad):
        policy = TrustPolicy(TrustConfig(low_trust_mute_multiplier=bad, high_trust_mute_multiplier=bad))

        assert policy.config.low_trust_mute_multiplier == 1.5
        assert policy.effective_mute_duration(60_000, 5) == 90_000
        assert policy.effective_mute_duration(60_000, 80) == 48_000

    def test_idempotent(self, policy):
        first = policy.effective_mute_duration(600_000, 5)
        assert all(policy.effective_mute_duration(600_000, 5) == first for _ in range(5))

    def test_clamp_helper(self):
        assert clamp_mute_duration(0) == MIN_MUTE_MS
        assert clamp_mute_duration(math.nan) == MIN_MUTE_MS
        assert clamp_mute_duration(120_000) == 120_000


class TestPenaltyAndRegen:

    def test_warn_and_mute_penalties(self, policy):
        assert policy.apply_penalty(30, InfractionKind.WARN) == 25
        assert policy.apply_penalty(30, InfractionKind.MUTE) == 15

    def test_penalty_clamped_to_min(self, policy):
        assert policy.apply_penalty(3, InfractionKind.MUTE) == 0

    def test_penalty_disabled(self, disabled_policy):
        assert disabled_policy.apply_penalty(30, InfractionKind.MUTE) == 30

    def test_zero_penalty_no_change(self):
        policy = TrustPolicy(TrustConfig(warn_penalty=0))
        assert policy.apply_penalty(30, InfractionKind.WARN) == 30

    def test_regen_counts_full_days(self, policy):
        result = policy.regenerate(20, 0, 3 * DAY_SECONDS + 100)
        assert result.regenerated is True
        assert result.trust == 23

    def test_regen_less_than_a_day(self, policy):
        result = policy.regenerate(20, 0, DAY_SECONDS - 1)
        assert result.regenerated is False
        assert result.trust == 20

    def test_regen_capped_by_max_days_and_max(self, policy):
        assert policy.regenerate(20, 0, 100 * DAY_SECONDS).trust == 50
        assert policy.regenerate(95, 0, 100 * DAY_SECONDS).trust == 100

    def test_regen_without_timestamp(self, policy):
        assert policy.regenerate(20, None, 100 * DAY_SECONDS).regenerated is False

    def test_clamp(self, policy):
        assert policy.clamp(150) == 100
        assert policy.clamp(-5) == 0
        assert policy.clamp(math.nan) == 30
