"""
I/O utilities for the packing GA.

Handles packing CSV serialization, the per-generation statistics log,
and YAML metadata sidecars.
"""

import csv
from pathlib import Path
from typing import Union
from datetime import datetime
import yaml

from squarepack.geometry import Point, Square

from .data_models import Gene, GenerationRecord, GenerationSnapshot


STATS_HEADER = "# Generation BestFitness AvgFitness"


def save_gene_to_csv(
    gene: Gene,
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save a Gene to CSV file.

    CSV format:
        index,x,y,theta,side
        0,0.5,0.5,0.0,1.0
        ...

    Args:
        gene: Gene to save
        output_path: Path for output CSV
        overwrite: If True, overwrite existing file

    Returns:
        Path to saved CSV file

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Output file already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(['index', 'x', 'y', 'theta', 'side'])
        for idx, square in enumerate(gene.squares):
            writer.writerow([idx, repr(square.center.x), repr(square.center.y),
                             repr(square.theta), repr(square.side)])

    return output_path


def load_gene_from_csv(csv_path: Union[str, Path]) -> Gene:
    """
    Load a packing CSV file into an (unevaluated) Gene.

    Args:
        csv_path: Path to CSV file

    Returns:
        Gene with squares in index order

    Raises:
        FileNotFoundError: If CSV file doesn't exist
        ValueError: If CSV format is invalid
    """
    csv_path = Path(csv_path)

    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    rows = []
    with open(csv_path, 'r') as f:
        reader = csv.DictReader(f)

        required = ['index', 'x', 'y', 'theta', 'side']
        if not reader.fieldnames or not all(col in reader.fieldnames for col in required):
            raise ValueError(f"Invalid CSV format in {csv_path}. Expected columns: {','.join(required)}")

        for row_number, row in enumerate(reader, start=1):
            try:
                rows.append((
                    int(row['index']),
                    Square(Point(float(row['x']), float(row['y'])),
                           float(row['theta']), float(row['side']))
                ))
            except (TypeError, ValueError):
                raise ValueError(f"Invalid values in row {row_number} of {csv_path}")

    if not rows:
        raise ValueError(f"CSV file is empty (no squares): {csv_path}")

    rows.sort(key=lambda item: item[0])
    return Gene(squares=[square for _, square in rows])


class GenerationStatsLog:
    """
    Append-only statistics sink.

    Collects one GenerationRecord per published snapshot and writes them as
    a whitespace-separated text table ordered by generation.
    """

    def __init__(self):
        self.records: list[GenerationRecord] = []

    def append(self, snapshot: GenerationSnapshot):
        self.records.append(GenerationRecord.from_snapshot(snapshot))

    def __len__(self) -> int:
        return len(self.records)

    def write(self, output_path: Union[str, Path], overwrite: bool = False) -> Path:
        return save_generation_stats(self.records, output_path, overwrite=overwrite)


def save_generation_stats(
    records: list[GenerationRecord],
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save generation statistics to a text file.

    Format:
        # Generation BestFitness AvgFitness
        1 12.5 80.25
        ...

    The initial population (generation 0) is not written.

    Args:
        records: GenerationRecord objects in any order
        output_path: Path for output file
        overwrite: If True, overwrite existing file

    Returns:
        Path to saved statistics file

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Statistics file already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w') as f:
        f.write(STATS_HEADER + "\n")
        for record in sorted(records, key=lambda r: r.generation):
            if record.generation > 0:
                f.write(f"{record.generation} {record.best_fitness!r} {record.mean_fitness!r}\n")

    return output_path


def load_generation_stats(stats_path: Union[str, Path]) -> list[GenerationRecord]:
    """
    Load a statistics file written by save_generation_stats.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If a data line is malformed
    """
    stats_path = Path(stats_path)

    if not stats_path.exists():
        raise FileNotFoundError(f"Statistics file not found: {stats_path}")

    records = []
    with open(stats_path, 'r') as f:
        for line_number, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            parts = line.split()
            if len(parts) != 3:
                raise ValueError(f"Malformed statistics line {line_number} in {stats_path}")
            records.append(GenerationRecord(
                generation=int(parts[0]),
                best_fitness=float(parts[1]),
                mean_fitness=float(parts[2]),
            ))

    return records


def save_metadata(
    metadata: dict,
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save metadata to YAML sidecar file.

    Args:
        metadata: Metadata dictionary
        output_path: Path for output YAML
        overwrite: If True, overwrite existing file

    Returns:
        Path to saved metadata file

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Metadata file already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    metadata = dict(metadata)
    metadata.setdefault("saved_at", datetime.now().isoformat())

    with open(output_path, 'w') as f:
        yaml.dump(metadata, f, default_flow_style=False, sort_keys=False)

    return output_path


def prepare_output_root(root: Union[str, Path], overwrite: bool = False) -> Path:
    """
    Create the run output directory.

    Raises:
        FileExistsError: If the directory exists and overwrite=False
    """
    root = Path(root)

    if root.exists() and not overwrite:
        raise FileExistsError(
            f"Output directory already exists: {root}\n"
            f"Set 'output.overwrite: true' in config to overwrite"
        )

    root.mkdir(parents=True, exist_ok=overwrite)
    return root

