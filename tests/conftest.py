from __future__ import annotations

import csv
from pathlib import Path

import pytest

from cushionstats.core.entities import CushionGeometry


def make_geometry(
    cushion_id: str = "C1",
    *,
    foam: str = "EN40-230",
    mass: float = 710.0,
    probes: tuple[float | None, ...] = (80.0, 80.0, 80.0, 80.0),
    **overrides: float,
) -> CushionGeometry:
    fields = {
        "length": 450.0,
        "width": 450.0,
        "vf_thickness": 20.0,
        "sag_height": 10.0,
        "sag_width": 100.0,
    }
    fields.update(overrides)
    return CushionGeometry(
        cushion_id=cushion_id,
        foam=foam,
        mass=mass,
        thickness_probes=probes,
        **fields,
    )


def write_csv(path: Path, rows: list[dict[str, object]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=list(rows[0]))
        writer.writeheader()
        writer.writerows(rows)
    return path


@pytest.fixture
def hysteresis_rows() -> list[dict[str, object]]:
    """Foam A clearly below foam B at L1, nearly identical at L2."""
    return [
        {"cushion": "1", "foam": "EN40-230", "L1": 10.1, "L2": 20.0},
        {"cushion": "2", "foam": "EN40-230", "L1": 10.3, "L2": 20.1},
        {"cushion": "3", "foam": "EN40-230", "L1": 9.9, "L2": 19.9},
        {"cushion": "4", "foam": "EN40-230", "L1": 10.0, "L2": 20.05},
        {"cushion": "5", "foam": "EN50-250", "L1": 10.5, "L2": 20.02},
        {"cushion": "6", "foam": "EN50-250", "L1": 10.6, "L2": 19.98},
        {"cushion": "7", "foam": "EN50-250", "L1": 10.4, "L2": 20.08},
        {"cushion": "8", "foam": "EN50-250", "L1": 10.7, "L2": 19.95},
    ]


@pytest.fixture
def lcdod_rows() -> list[dict[str, object]]:
    """Only one EN50-250 cushion at L3, so that group cannot be tested."""
    return [
        {"cushion": "1", "foam": "EN40-230", "L1": 1.20, "L3": 3.1},
        {"cushion": "2", "foam": "EN40-230", "L1": 1.25, "L3": 3.3},
        {"cushion": "3", "foam": "EN40-230", "L1": 1.22, "L3": 3.2},
        {"cushion": "5", "foam": "EN50-250", "L1": 1.40, "L3": 3.9},
        {"cushion": "6", "foam": "EN50-250", "L1": 1.38, "L3": None},
        {"cushion": "7", "foam": "EN50-250", "L1": 1.43, "L3": None},
    ]


@pytest.fixture
def geometries() -> list[CushionGeometry]:
    return [
        make_geometry(str(i), foam="EN40-230", mass=700.0 + 5 * i) for i in range(1, 5)
    ] + [
        make_geometry(str(i), foam="EN50-250", mass=830.0 + 5 * i) for i in range(5, 9)
    ]


@pytest.fixture
def data_dir(tmp_path, hysteresis_rows, lcdod_rows) -> Path:
    root = tmp_path / "data"
    write_csv(root / "measurements" / "hysteresis.csv", hysteresis_rows)
    write_csv(
        root / "measurements" / "lcdod.csv",
        [{k: ("" if v is None else v) for k, v in row.items()} for row in lcdod_rows],
    )
    geometry_rows = []
    for i in range(1, 9):
        foam = "EN40-230" if i <= 4 else "EN50-250"
        geometry_rows.append(
            {
                "cushion": i,
                "foam": foam,
                "length": 450,
                "width": 450,
                "vf_thickness": 20,
                "sag_height": 10,
                "sag_width": 100,
                "T1": 80,
                "T2": 79.5,
                "T3": 80.5,
                "T4": "",
                "mass": (700 if i <= 4 else 830) + 5 * i,
            }
        )
    write_csv(root / "density.csv", geometry_rows)
    return root


@pytest.fixture
def geometry_factory():
    return make_geometry
