import numpy as np
import pytest
from hypothesis import given, strategies as st

from semslam.quadmatch import (
    DescriptorType,
    QuadMatch,
    circular_match,
    descriptor_distance,
    descriptor_settings,
    filter_tracks,
    match_in_window,
    within_region,
)


def _float_desc(n, value=1.0):
    return np.full((n, 4), value, dtype=np.float32)


# ----- descriptor settings -------------------------------------------------

@pytest.mark.parametrize(
    "kind, threshold, binary",
    [
        (DescriptorType.SIFT, 8000.0, False),
        (DescriptorType.SURF, 0.3, False),
        (DescriptorType.BRISK, 120.0, True),
        (DescriptorType.FREAK, 100.0, True),
        (DescriptorType.ORB, 80.0, True),
    ],
)
def test_descriptor_settings(kind, threshold, binary):
    settings = descriptor_settings(kind)
    assert settings.distance_threshold == pytest.approx(threshold)
    assert settings.binary is binary


def test_descriptor_settings_unknown():
    with pytest.raises(ValueError):
        descriptor_settings("nonsense")


# ----- descriptor distance ---------------------------------------------------

def test_hamming_distance_all_bits():
    a = np.array([0xFF], dtype=np.uint8)
    b = np.array([0x00], dtype=np.uint8)
    assert descriptor_distance(a, b, True) == 8.0


def test_l2_distance():
    a = np.array([3.0, 4.0], dtype=np.float32)
    b = np.zeros(2, dtype=np.float32)
    assert descriptor_distance(a, b, False) == pytest.approx(5.0)


def test_distance_shape_mismatch():
    with pytest.raises(ValueError):
        descriptor_distance(np.zeros(3, np.float32), np.zeros(4, np.float32), False)


def test_binary_requires_uint8():
    with pytest.raises(ValueError):
        descriptor_distance(np.zeros(3, np.float32), np.zeros(3, np.float32), True)


def test_float_requires_floating():
    with pytest.raises(ValueError):
        descriptor_distance(np.zeros(3, np.uint8), np.zeros(3, np.uint8), False)


@given(
    st.lists(st.integers(0, 255), min_size=1, max_size=32),
    st.lists(st.integers(0, 255), min_size=1, max_size=32),
)
def test_hamming_symmetric_and_bounded(xs, ys):
    n = min(len(xs), len(ys))
    a = np.array(xs[:n], dtype=np.uint8)
    b = np.array(ys[:n], dtype=np.uint8)
    d = descriptor_distance(a, b, True)
    assert d == descriptor_distance(b, a, True)
    assert 0 <= d <= 8 * n
    assert descriptor_distance(a, a, True) == 0


# ----- window matching --------------------------------------------------------

def test_match_in_window_picks_nearest_descriptor():
    kp1 = [(10.0, 10.0)]
    kp2 = [(12.0, 10.0), (15.0, 10.5)]
    d1 = np.array([[1.0, 0.0]], dtype=np.float32)
    d2 = np.array([[0.0, 1.0], [1.0, 0.0]], dtype=np.float32)
    matches = match_in_window(kp1, d1, kp2, d2, 20, 2, 8000.0, False)
    assert matches == [(1, 0.0)]


def test_match_in_window_outside_window_gives_minus_one():
    kp1 = [(10.0, 10.0)]
    kp2 = [(10.0, 50.0)]
    matches = match_in_window(kp1, _float_desc(1), kp2, _float_desc(1), 20, 2, 8000.0, False)
    assert len(matches) == 1
    assert matches[0][0] == -1


def test_match_in_window_threshold_rejects():
    kp1 = [(0.0, 0.0)]
    kp2 = [(1.0, 0.0)]
    d1 = np.array([[0.0, 0.0]], dtype=np.float32)
    d2 = np.array([[3.0, 4.0]], dtype=np.float32)
    assert match_in_window(kp1, d1, kp2, d2, 20, 2, 1.0, False)[0][0] == -1
    assert match_in_window(kp1, d1, kp2, d2, 20, 2, 10.0, False)[0][0] == 0


# ----- region ---------------------------------------------------------------

def test_within_region_is_strict():
    region = (1280, 960)
    assert within_region((1.0, 1.0), region)
    assert not within_region((0.0, 5.0), region)
    assert not within_region((5.0, 960.0), region)
    assert not within_region((1280.0, 5.0), region)


# ----- track filtering --------------------------------------------------------

LC = (100.0, 100.0)
RC = (90.0, 100.0)
LP = (95.0, 105.0)
RP = (85.0, 105.0)


def test_filter_tracks_accepts_consistent_track():
    result = filter_tracks([LC], [RC], [LP], [RP], [LP])
    assert result == [
        QuadMatch(
            u1c=LC[0], v1c=LC[1], i1c=0,
            u2c=RC[0], v2c=RC[1], i2c=0,
            u1p=LP[0], v1p=LP[1], i1p=0,
            u2p=RP[0], v2p=RP[1], i2p=0,
        )
    ]


def test_filter_tracks_rejects_inconsistent_direct_track():
    assert filter_tracks([LC], [RC], [LP], [RP], [(LP[0] + 2.0, LP[1])]) == []


def test_filter_tracks_rejects_outside_region():
    far = (1300.0, 100.0)
    assert filter_tracks([far], [RC], [LP], [RP], [LP]) == []


def test_filter_tracks_indices_follow_input_order():
    bad = (0.0, 0.0)
    result = filter_tracks([bad, LC], [bad, RC], [bad, LP], [bad, RP], [bad, LP])
    assert [m.i1c for m in result] == [1]


def test_filter_tracks_size_mismatch():
    with pytest.raises(ValueError):
        filter_tracks([LC], [RC], [LP], [RP], [])


# ----- circular matching ------------------------------------------------------

def _quad_inputs():
    kp_lc = [(500.0, 500.0), LC]
    kp_rc = [(900.0, 900.0), RC]
    kp_rp = [(50.0, 50.0), RP]
    kp_lp = [(300.0, 300.0), LP]
    return kp_lc, kp_rc, kp_rp, kp_lp


def test_circular_match_finds_loop():
    kp_lc, kp_rc, kp_rp, kp_lp = _quad_inputs()
    d = _float_desc(2)
    result = circular_match(kp_lc, d, kp_rc, d, kp_rp, d, kp_lp, d, 8000.0, False)
    assert result == [
        QuadMatch(
            u1c=LC[0], v1c=LC[1], i1c=1,
            u2c=RC[0], v2c=RC[1], i2c=1,
            u1p=LP[0], v1p=LP[1], i1p=1,
            u2p=RP[0], v2p=RP[1], i2p=1,
        )
    ]


def test_circular_match_skips_index_zero_chains():
    d = _float_desc(1)
    result = circular_match([LC], d, [RC], d, [RP], d, [LP], d, 8000.0, False)
    assert result == []


def test_circular_match_rejects_inconsistent_motion():
    kp_lc, kp_rc, kp_rp, kp_lp = _quad_inputs()
    kp_lp = [kp_lp[0], (LP[0] - 10.0, LP[1])]
    d = _float_desc(2)
    result = circular_match(kp_lc, d, kp_rc, d, kp_rp, d, kp_lp, d, 8000.0, False)
    assert result == []


def test_circular_match_empty_keypoints():
    d = _float_desc(2)
    kp_lc, kp_rc, kp_rp, _ = _quad_inputs()
    assert circular_match(kp_lc, d, kp_rc, d, kp_rp, d, [], d[:0], 8000.0, False) == []


def test_circular_match_binary_descriptors():
    kp_lc, kp_rc, kp_rp, kp_lp = _quad_inputs()
    d = np.zeros((2, 32), dtype=np.uint8)
    result = circular_match(kp_lc, d, kp_rc, d, kp_rp, d, kp_lp, d, 80.0, True)
    assert [(m.i1c, m.i2c, m.i2p, m.i1p) for m in result] == [(1, 1, 1, 1)]