import numpy as np
import pytest
from lifelines import NelsonAalenFitter

from dnnsurv.utils import (
    baseline_cumulative_hazard_at,
    compute_baseline_hazard,
    predict_survival,
    risk_set_mask,
    tied_event_mask,
)


def test_risk_set_masks():
    t = np.array([1.0, 2.0, 2.0, 4.0])
    e = np.array([1, 1, 0, 1])
    at = np.array([2.0, 4.0])

    np.testing.assert_array_equal(
        risk_set_mask(t, at), [[False, True, True, True], [False, False, False, True]]
    )
    np.testing.assert_array_equal(
        tied_event_mask(t, e, at), [[False, True, False, False], [False, False, False, True]]
    )


def test_breslow_with_zero_scores_is_nelson_aalen(rng):
    t = rng.exponential(size=50)
    e = rng.integers(0, 2, size=50)
    e[0] = 1

    baseline = compute_baseline_hazard(t, e, np.zeros(50))
    naf = NelsonAalenFitter().fit(t, event_observed=e)

    expected = naf.cumulative_hazard_at_times(baseline["time"].to_numpy()).to_numpy()
    np.testing.assert_allclose(baseline["cumulative_hazard"], expected, rtol=1e-8)


def test_hand_computed_breslow_and_efron_with_tie():
    t = np.array([1.0, 2.0, 2.0, 3.0])
    e = np.array([1, 1, 1, 0])
    scores = np.zeros(4)

    breslow = compute_baseline_hazard(t, e, scores, method="breslow")
    efron = compute_baseline_hazard(t, e, scores, method="efron")

    np.testing.assert_allclose(breslow["time"], [1.0, 2.0])
    np.testing.assert_allclose(breslow["hazard"], [1 / 4, 2 / 3])
    np.testing.assert_allclose(efron["hazard"], [1 / 4, 1 / 3 + 1 / 2])
    np.testing.assert_allclose(efron["cumulative_hazard"], [1 / 4, 1 / 4 + 1 / 3 + 1 / 2])


def test_methods_agree_without_ties(rng):
    t = rng.exponential(size=40)
    e = rng.integers(0, 2, size=40)
    scores = rng.normal(size=40)

    breslow = compute_baseline_hazard(t, e, scores, method="breslow")
    efron = compute_baseline_hazard(t, e, scores, method="efron")

    np.testing.assert_allclose(breslow["cumulative_hazard"], efron["cumulative_hazard"])


def test_survival_is_invariant_to_score_shift(rng):
    t = rng.exponential(size=40)
    e = np.ones(40, dtype=int)
    scores = rng.normal(size=40)
    times = [0.1, 0.5, 1.0]

    surv = predict_survival(compute_baseline_hazard(t, e, scores), scores, times)
    shifted = predict_survival(compute_baseline_hazard(t, e, scores + 50.0), scores + 50.0, times)

    np.testing.assert_allclose(surv, shifted, rtol=1e-8)


def test_predicted_survival_shape_and_monotonicity(rng):
    t = rng.exponential(size=60)
    e = rng.integers(0, 2, size=60)
    scores = rng.normal(size=60)
    baseline = compute_baseline_hazard(t, e, scores)

    surv = predict_survival(baseline, np.array([-1.0, 0.0, 1.0]), [0.0, 0.2, 0.5, 1.0, 2.0])

    assert surv.shape == (3, 5)
    assert np.all((surv >= 0) & (surv <= 1))
    assert np.all(np.diff(surv, axis=1) <= 0)
    assert np.all(np.diff(surv, axis=0) <= 0)


def test_cumulative_hazard_is_zero_before_first_event():
    baseline = compute_baseline_hazard([2.0, 3.0], [1, 1], [0.0, 0.0])
    np.testing.assert_allclose(baseline_cumulative_hazard_at(baseline, [0.0, 1.9, 2.0, 10.0]),
                               [0.0, 0.0, 0.5, 1.5])


def test_no_events_gives_flat_survival():
    baseline = compute_baseline_hazard([1.0, 2.0], [0, 0], [0.3, -0.3])
    assert len(baseline) == 0
    np.testing.assert_allclose(predict_survival(baseline, [0.3, -0.3], [1.0, 5.0]), 1.0)


def test_unknown_method_rejected():
    with pytest.raises(ValueError):
        compute_baseline_hazard([1.0], [1], [0.0], method="kalbfleisch")
