import laspy
import numpy as np
import pytest
import yaml

from voxelvis.core.exporter import LasWriter, NpzWriter, PlyWriter, write_markers
from voxelvis.core.pointcloud import PointBatch
from voxelvis.core.sinks import ColorPointSink, IntensityPointSink, Marker
from voxelvis.core.voxel import Color


def colored_batch() -> PointBatch:
    sink = ColorPointSink()
    sink.append(np.array([0.0, 0.0, 0.0]), Color(10, 20, 30))
    sink.append(np.array([1.0, 2.0, 3.0]), Color(255, 0, 128))
    return sink.to_batch()


def test_ply_writer_writes_colors(tmp_path) -> None:
    path = tmp_path / "surface.ply"
    writer = PlyWriter(str(path))
    writer.write_batch(colored_batch())
    writer.close()

    lines = path.read_text(encoding="utf-8").splitlines()
    assert "element vertex 2" in lines
    assert "property uchar red" in lines
    end_idx = lines.index("end_header")
    rows = [row.split() for row in lines[end_idx + 1 :]]
    assert rows[1][3:] == ["255", "0", "128"]
    np.testing.assert_allclose([float(v) for v in rows[1][:3]], [1.0, 2.0, 3.0])


def test_ply_writer_writes_intensity(tmp_path) -> None:
    sink = IntensityPointSink()
    sink.append(np.array([0.5, 0.5, 0.5]), -0.25)
    path = tmp_path / "distance.ply"
    writer = PlyWriter(str(path))
    writer.write_batch(sink.to_batch())
    writer.close()
    lines = path.read_text(encoding="utf-8").splitlines()
    assert "property float intensity" in lines
    assert "property uchar red" not in lines
    assert float(lines[-1].split()[3]) == -0.25


def test_npz_writer_fills_missing_attributes(tmp_path) -> None:
    path = tmp_path / "cloud.npz"
    writer = NpzWriter(str(path))
    writer.write_batch(colored_batch())
    writer.write_batch(PointBatch(xyz=np.array([[4.0, 4.0, 4.0]])))
    writer.close()

    with np.load(path) as data:
        assert data["xyz"].shape == (3, 3)
        rgb = data["rgb"]
    np.testing.assert_array_equal(rgb[0], [10, 20, 30])
    np.testing.assert_array_equal(rgb[2], [0, 0, 0])


def test_las_writer_stores_rgb_and_distance(tmp_path) -> None:
    path = tmp_path / "cloud.las"
    writer = LasWriter(str(path))
    batch = colored_batch()
    batch.attrs["intensity"] = np.array([-0.5, 0.25], dtype=np.float32)
    writer.write_batch(batch)
    writer.close()

    las = laspy.read(path)
    assert len(las.points) == 2
    np.testing.assert_array_equal(np.asarray(las.red), [10 * 257, 255 * 257])
    np.testing.assert_allclose(np.asarray(las.z), [0.0, 3.0], atol=1e-3)
    np.testing.assert_allclose(np.asarray(las["distance"]), [-0.5, 0.25])


def _marker() -> Marker:
    marker = Marker(frame_id="map", scale=(0.2, 0.2, 0.2))
    marker.add_cube(np.array([0.1, 0.1, 0.1]), Color(255, 0, 0))
    marker.add_cube(np.array([0.3, 0.1, 0.1]), Color(0, 255, 0))
    return marker


def test_write_markers_yaml(tmp_path) -> None:
    path = write_markers(tmp_path / "markers.yaml", [_marker()])
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    m = data["markers"][0]
    assert m["frame_id"] == "map"
    assert m["type"] == "CUBE_LIST"
    assert m["scale"] == [0.2, 0.2, 0.2]
    assert len(m["points"]) == len(m["colors"]) == 2
    assert m["colors"][1] == [0.0, 1.0, 0.0, 1.0]


def test_write_markers_npz(tmp_path) -> None:
    path = write_markers(tmp_path / "markers.npz", [_marker()])
    with np.load(path) as data:
        assert data["points"].shape == (2, 3)
        assert data["colors"].shape == (2, 4)
        assert str(data["frame_id"]) == "map"


def test_write_markers_rejects_unknown_extension(tmp_path) -> None:
    with pytest.raises(ValueError):
        write_markers(tmp_path / "markers.txt", [_marker()])


@pytest.mark.parametrize("suffix", ["ply", "npz", "las"])
def test_empty_extraction_still_writes_a_file(tmp_path, suffix: str) -> None:
    path = tmp_path / f"empty.{suffix}"
    writer = {"ply": PlyWriter, "npz": NpzWriter, "las": LasWriter}[suffix](str(path))
    writer.write_batch(ColorPointSink().to_batch())
    writer.close()
    assert path.exists()
    if suffix == "las":
        assert len(laspy.read(path).points) == 0
    elif suffix == "npz":
        with np.load(path) as data:
            assert data["xyz"].shape == (0, 3)
    else:
        assert "element vertex 0" in path.read_text(encoding="utf-8").splitlines()


@pytest.mark.parametrize("writer_cls", [PlyWriter, NpzWriter, LasWriter])
def test_close_without_batches_writes_empty_file(tmp_path, writer_cls) -> None:
    path = tmp_path / f"nothing.{writer_cls.__name__[:3].lower()}"
    writer = writer_cls(str(path))
    writer.close()
    assert path.exists()
