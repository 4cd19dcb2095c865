"""Tests del resolver de coordenadas canónicas (versión pandas)."""

import pandas as pd
import pyarrow.parquet as pq
import pytest

from cyclistic.gold.build_station_coords import (
    STATION_COLUMNS,
    VARIANT_KEYS,
    canonical_station_mapping,
    count_station_variants,
    resolve_all_stations,
    resolve_canonical_stations,
    write_station_coords,
)
from cyclistic.models import TripObservation


def _mapping(df, prefix="end"):
    return canonical_station_mapping(resolve_canonical_stations(df, prefix))


def test_when_station_has_single_coordinate_then_it_is_canonical(make_trips) -> None:
    df = make_trips(("A", "X", 1.0, 2.0, 5))

    assert _mapping(df) == {"A": ("X", 1.0, 2.0)}


def test_when_coordinates_conflict_then_majority_wins(make_trips) -> None:
    df = make_trips(("A", "X", 1.0, 2.0, 3), ("A", "X", 1.1, 2.1, 7))

    assert _mapping(df) == {"A": ("X", 1.1, 2.1)}


def test_when_station_id_missing_then_row_is_ignored(make_trips) -> None:
    df = make_trips(("A", "X", 1.0, 2.0, 1), (None, "Y", 5.0, 6.0, 10))

    assert _mapping(df) == {"A": ("X", 1.0, 2.0)}


def test_when_only_missing_ids_then_mapping_is_empty(make_trips) -> None:
    df = make_trips((None, "Y", 5.0, 6.0, 3))

    canonical = resolve_canonical_stations(df)
    assert list(canonical.columns) == STATION_COLUMNS
    assert canonical.empty


def test_when_input_is_empty_then_output_is_empty() -> None:
    empty = pd.DataFrame(columns=["end_station_id", "end_station_name", "end_lat", "end_lng"])

    canonical = resolve_canonical_stations(empty)
    assert list(canonical.columns) == STATION_COLUMNS
    assert len(canonical) == 0
    assert canonical_station_mapping(canonical) == {}


def test_when_counts_tie_then_smallest_name_wins(make_trips) -> None:
    df = make_trips(("A", "Y", 3.0, 4.0, 4), ("A", "X", 1.0, 2.0, 4))

    assert _mapping(df) == {"A": ("X", 1.0, 2.0)}


def test_when_counts_and_name_tie_then_smallest_coordinates_win(make_trips) -> None:
    df = make_trips(
        ("A", "X", 1.0, 2.5, 2),
        ("A", "X", 1.0, 2.0, 2),
        ("A", "X", 1.5, 0.0, 2),
    )

    assert _mapping(df) == {"A": ("X", 1.0, 2.0)}


def test_when_counts_tie_then_missing_name_loses(make_trips) -> None:
    df = make_trips(("A", None, 0.0, 0.0, 2), ("A", "Z", 9.0, 9.0, 2))

    assert _mapping(df) == {"A": ("Z", 9.0, 9.0)}


def test_when_missing_name_is_most_frequent_then_it_is_kept_as_none(make_trips) -> None:
    df = make_trips(("A", None, 0.0, 0.0, 3), ("A", "Z", 9.0, 9.0, 1))

    assert _mapping(df) == {"A": (None, 0.0, 0.0)}


def test_tie_break_is_stable_under_row_reordering(make_trips) -> None:
    df = make_trips(
        ("A", "X", 1.0, 2.0, 4),
        ("A", "Y", 3.0, 4.0, 4),
        ("B", "Q", 7.0, 8.0, 1),
        ("B", "P", 7.0, 8.0, 1),
    )
    expected = _mapping(df)

    for seed in range(5):
        shuffled = df.sample(frac=1, random_state=seed).reset_index(drop=True)
        assert _mapping(shuffled) == expected

    assert expected == {"A": ("X", 1.0, 2.0), "B": ("P", 7.0, 8.0)}


def test_every_non_null_id_appears_exactly_once(make_trips) -> None:
    df = make_trips(
        ("A", "X", 1.0, 2.0, 2),
        ("A", "X2", 1.0, 2.0, 1),
        ("B", "Y", 3.0, 4.0, 1),
        ("C", None, None, None, 1),
        (None, "Z", 5.0, 6.0, 4),
    )

    canonical = resolve_canonical_stations(df)
    assert canonical["station_id"].is_unique
    assert set(canonical["station_id"]) == {"A", "B", "C"}


def test_selected_variant_has_max_count(make_trips) -> None:
    df = make_trips(
        ("A", "X", 1.0, 2.0, 2),
        ("A", "X", 1.0, 2.1, 5),
        ("A", "W", 1.0, 2.0, 3),
        ("B", "Y", 3.0, 4.0, 1),
        ("B", "Y", 3.1, 4.0, 6),
    )

    counts = count_station_variants(df)
    canonical = resolve_canonical_stations(df)

    chosen = counts.merge(canonical, on=STATION_COLUMNS, how="inner")
    assert len(chosen) == len(canonical)
    for row in chosen.itertuples(index=False):
        assert row.n == counts.loc[counts["station_id"] == row.station_id, "n"].max()


def test_resolving_own_output_is_idempotent(make_trips) -> None:
    df = make_trips(
        ("A", "X", 1.0, 2.0, 3),
        ("A", "X", 1.1, 2.1, 7),
        ("B", "Y", 3.0, 4.0, 4),
        ("B", "Z", 3.0, 4.0, 4),
    )
    canonical = resolve_canonical_stations(df)

    rows = canonical.rename(
        columns={
            "station_id": "end_station_id",
            "station_name": "end_station_name",
            "lat": "end_lat",
            "lng": "end_lng",
        }
    )

    assert _mapping(rows) == canonical_station_mapping(canonical)


def test_input_frame_is_not_modified(make_trips) -> None:
    df = make_trips(("A", "X", 1.0, 2.0, 3), (None, "Y", 5.0, 6.0, 1))
    before = df.copy()

    resolve_canonical_stations(df)

    pd.testing.assert_frame_equal(df, before)


def test_count_station_variants_counts_each_combination(make_trips) -> None:
    df = make_trips(("A", "X", 1.0, 2.0, 3), ("A", "X", 1.1, 2.1, 7), (None, "Y", 5.0, 6.0, 2))

    counts = count_station_variants(df).sort_values("n").reset_index(drop=True)

    assert counts["n"].tolist() == [3, 7]
    assert counts["station_id"].tolist() == ["A", "A"]


def test_accepts_trip_observations() -> None:
    observations = [TripObservation("A", "X", 1.0, 2.0)] * 2 + [
        TripObservation("A", "X", 9.0, 9.0),
        TripObservation(None, "Z", 0.0, 0.0),
    ]

    assert _mapping(observations) == {"A": ("X", 1.0, 2.0)}


def test_empty_observation_list_gives_empty_mapping() -> None:
    assert _mapping([]) == {}


def test_missing_columns_raise_key_error() -> None:
    df = pd.DataFrame({"end_station_id": ["A"], "end_lat": [1.0]})

    with pytest.raises(KeyError, match="end_station_name"):
        resolve_canonical_stations(df)


def test_start_prefix_uses_start_columns(trips_df) -> None:
    mapping = _mapping(trips_df, prefix="start")

    assert mapping == {
        "S1": ("Clark St", 41.90, -87.63),
        "S2": ("Lake Shore", 41.88, -87.61),
    }


def test_end_prefix_on_full_trip_table(trips_df) -> None:
    mapping = _mapping(trips_df)

    assert mapping == {
        "S1": ("Clark St", 41.90, -87.63),
        "S2": ("Lake Shore", 41.88, -87.61),
        "S3": ("Wells St", 41.91, -87.64),
    }


def test_resolve_all_stations_counts_both_sides(trips_df) -> None:
    mapping = canonical_station_mapping(resolve_all_stations(trips_df))

    assert set(mapping) == {"S1", "S2", "S3"}
    assert mapping["S2"] == ("Lake Shore", 41.88, -87.61)


def test_write_station_coords_uses_fixed_schema(tmp_path, make_trips) -> None:
    canonical = resolve_canonical_stations(make_trips(("A", "X", 1.0, 2.0, 1), ("B", None, 3.0, 4.0, 1)))
    out_parquet = tmp_path / "gold" / "station_coords.parquet"
    out_csv = tmp_path / "gold" / "station_coords.csv"

    write_station_coords(canonical, out_parquet, out_csv)

    table = pq.read_table(out_parquet)
    assert table.schema.names == STATION_COLUMNS
    assert str(table.schema.field("station_id").type) == "string"
    assert str(table.schema.field("lat").type) == "double"
    assert table.column("station_name").to_pylist() == ["X", None]
    assert out_csv.exists()


def test_categorical_columns_tie_break_alphabetically(make_trips) -> None:
    df = make_trips(("A", "Y", 3.0, 4.0, 4), ("A", "X", 1.0, 2.0, 4), ("B", None, 5.0, 6.0, 1))
    df["end_station_name"] = pd.Categorical(df["end_station_name"], categories=["Y", "X"])
    df["end_station_id"] = pd.Categorical(df["end_station_id"], categories=["B", "A"])

    assert _mapping(df) == {"A": ("X", 1.0, 2.0), "B": (None, 5.0, 6.0)}


def test_output_columns_are_independent_of_group_keys() -> None:
    assert STATION_COLUMNS == VARIANT_KEYS
    assert STATION_COLUMNS is not VARIANT_KEYS
