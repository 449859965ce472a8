import numpy as np
import pytest

from semslam.camera import CameraIntrinsics, camera_from_parameters


def _params():
    return {
        "camera.fx": "707.0912",
        "camera.fy": "707.0912",
        "camera.cx": "601.8873",
        "camera.cy": "183.1104",
        "camera.d0": "0",
        "camera.d1": "0",
        "camera.d2": "0",
        "camera.d3": "0",
        "camera.d4": "0",
        "camera.scale": "1000",
    }


def test_camera_from_parameters_reads_all_fields():
    cam = camera_from_parameters(_params())
    assert cam.fx == 707.0912
    assert cam.fy == 707.0912
    assert cam.cx == 601.8873
    assert cam.cy == 183.1104
    assert cam.scale == 1000.0
    assert (cam.d0, cam.d1, cam.d2, cam.d3, cam.d4) == (0.0, 0.0, 0.0, 0.0, 0.0)


def test_camera_from_parameters_missing_key():
    params = _params()
    del params["camera.scale"]
    with pytest.raises(KeyError):
        camera_from_parameters(params)


def test_camera_from_parameters_bad_value():
    params = _params()
    params["camera.fx"] = "abc"
    with pytest.raises(ValueError):
        camera_from_parameters(params)


def test_back_project_principal_point_lies_on_axis():
    cam = camera_from_parameters(_params())
    x, y, z = cam.back_project(cam.cx, cam.cy, 2000)
    assert x == pytest.approx(0.0)
    assert y == pytest.approx(0.0)
    assert z == pytest.approx(2000 / cam.scale)


def test_back_project_reprojects_to_pixel():
    cam = CameraIntrinsics(fx=500.0, fy=400.0, cx=320.0, cy=240.0, scale=5000.0)
    u, v, d = 100.0, 50.0, 12000.0
    x, y, z = cam.back_project(u, v, d)
    assert cam.fx * x / z + cam.cx == pytest.approx(u)
    assert cam.fy * y / z + cam.cy == pytest.approx(v)


def test_back_project_arrays():
    cam = CameraIntrinsics(fx=500.0, fy=400.0, cx=320.0, cy=240.0, scale=1.0)
    u = np.array([0, 10, 20])
    v = np.array([5, 6, 7])
    d = np.array([1.0, 2.0, 3.0])
    x, y, z = cam.back_project(u, v, d)
    np.testing.assert_allclose(z, d)
    np.testing.assert_allclose(cam.fx * x / z + cam.cx, u)
    np.testing.assert_allclose(cam.fy * y / z + cam.cy, v)