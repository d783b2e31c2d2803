import pandas as pd
from typing import Iterator, Dict, Optional
from pathlib import Path
from .point import Point

_EPOCH = pd.Timestamp("1970-01-01", tz="UTC")


def to_epoch_millis(column: pd.Series) -> pd.Series:
    """
    Converts a timestamp column to integer milliseconds since the epoch.
    Numeric columns are assumed to already be milliseconds.
    """
    if column.isna().any():
        rows = list(column.index[column.isna()])
        raise ValueError(f"Timestamp column '{column.name}' has blank values at rows {rows}")
    if pd.api.types.is_numeric_dtype(column):
        return column.astype("int64")
    parsed = pd.to_datetime(column, utc=True)
    return (parsed - _EPOCH) // pd.Timedelta(milliseconds=1)


class FixStream:
    """
    Replays a recorded track by reading a CSV file chunk by chunk.
    Missing accuracy/provider columns fall back to the configured defaults.
    """
    def __init__(
        self,
        filepath: str | Path,
        sep: str = ',',
        col_mapping: Dict[str, str] = None,
        default_accuracy: float = 0.0,
        default_provider: str = 'unknown',
        default_obj_id: Optional[str] = None,
        chunksize: int = 1000
    ):
        self.filepath = Path(filepath)
        if not self.filepath.exists():
            raise FileNotFoundError(f"File not found: {self.filepath}")

        self.sep = sep
        self.default_accuracy = default_accuracy
        self.default_provider = default_provider
        self.default_obj_id = default_obj_id
        self.chunksize = chunksize

        self.mapping = {
            'lat': 'lat',
            'lon': 'lon',
            'accuracy': 'accuracy',
            'timestamp': 'timestamp',
            'provider': 'provider',
            'obj_id': 'obj_id'
        }
        if col_mapping:
            self.mapping.update(col_mapping)

    def __iter__(self) -> Iterator[Point]:
        return self.stream()

    def stream(self) -> Iterator[Point]:
        """
        Yields fixes from the file one by one, in file order.
        """
        header = pd.read_csv(self.filepath, nrows=0, sep=self.sep)
        required = [self.mapping[k] for k in ('lat', 'lon', 'timestamp')]
        missing = [c for c in required if c not in header.columns]
        if missing:
            raise ValueError(f"CSV is missing required columns {missing}. Found: {list(header.columns)}")

        has_accuracy_col = self.mapping['accuracy'] in header.columns
        has_provider_col = self.mapping['provider'] in header.columns
        has_id_col = self.mapping['obj_id'] in header.columns

        with pd.read_csv(self.filepath, chunksize=self.chunksize, sep=self.sep) as reader:
            for chunk in reader:
                chunk[self.mapping['timestamp']] = to_epoch_millis(chunk[self.mapping['timestamp']])

                for _, row in chunk.iterrows():
                    yield Point(
                        lat=float(row[self.mapping['lat']]),
                        lon=float(row[self.mapping['lon']]),
                        accuracy=float(row[self.mapping['accuracy']]) if has_accuracy_col else self.default_accuracy,
                        timestamp=int(row[self.mapping['timestamp']]),
                        provider=str(row[self.mapping['provider']]) if has_provider_col else self.default_provider,
                        obj_id=str(row[self.mapping['obj_id']]) if has_id_col else self.default_obj_id
                    )
