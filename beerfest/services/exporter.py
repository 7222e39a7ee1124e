"""Export the user's beer ratings as CSV."""

import csv
import io
from typing import Iterable

from ..models.entities import Beer

RATINGS_HEADER = ["Beer", "Brewery", "Style", "Rating"]


def ratings_csv(beers: Iterable[Beer]) -> str:
    """
    Header row, then one row per rated beer with the text columns quoted.
    Unrated beers are left out.
    """
    buffer = io.StringIO()
    buffer.write(",".join(RATINGS_HEADER) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    for beer in beers:
        if beer.rating <= 0:
            continue
        writer.writerow([beer.name, beer.brewery.name, beer.style, beer.rating])
    return buffer.getvalue()
