"""
Reference samples installed into an empty database.
"""
from typing import Any, Dict, List
from sqlalchemy.orm import Session
import logging

from formulation.db.samples import SampleStore

logger = logging.getLogger(__name__)

SEED_FIELDS = (
    "code", "filter_ventilation", "filter_pressure_drop", "permeability",
    "quantitative", "citrate", "potassium_ratio", "tar", "nicotine", "co",
)

# Ventilation and citrate as fractions; yields in mg/cig.
DEFAULT_SAMPLES = [
    ("M06", "0.409", 4318, "71.2", "27.8", "0.022", "1.0", "6.88201061090464", "0.592059469957721", "3.933"),
    ("S0-2", "0.39", 4272, "71.2", "27.8", "0.022", "1.0", "6.938704055407103", "0.606108118323836", "3.8686666666666665"),
    ("M17", "0.385", 4313, "71.2", "27.8", "0.022", "1.0", "6.88008538346379", "0.609073072643856", "3.756"),
    ("M01", "0.218", 3868, "41.3", "25.4", "0.022", "0.7", "9.674505032200457", "0.815132110493353", "5.636"),
    ("M02", "0.202", 3868, "72.0", "28.4", "0.009", "1.0", "9.997684233415136", "0.865028902966716", "5.823"),
    ("M03", "0.21", 4272, "60.6", "25.1", "0.022", "0.7", "9.215296359953719", "0.775943255261382", "5.463"),
    ("M04", "0.197", 4272, "72.1", "26.7", "0.013", "0.7", "9.31756726622841", "0.8167436773038", "5.663"),
    ("M05", "0.192", 4567, "61.2", "29.2", "0.009", "0.7", "9.149617470030904", "0.786067169007716", "6.168"),
    ("M07", "0.198", 5313, "82.6", "25.6", "0.013", "0.4", "8.509333466002252", "0.721069145805097", "5.26"),
    ("M08", "0.209", 5831, "81.3", "32.8", "0.022", "0.7", "7.306653745974666", "0.72", "4.957"),
    ("M09", "0.412", 3868, "40.8", "28.9", "0.022", "0.7", "7.66383548276469", "0.647240885555945", "4.822"),
    ("M10", "0.418", 3868, "41.3", "25.4", "0.022", "0.7", "8.19047357664283", "0.695278220014253", "5.005"),
    ("M11", "0.403", 4272, "49.5", "25.1", "0.017", "0.7", "7.92308022967455", "0.675122517473582", "4.43"),
    ("M12", "0.403", 4272, "50.3", "26.5", "0.013", "0.7", "7.854320281800892", "0.693163143971973", "5.085"),
    ("M13", "0.405", 4567, "61.2", "29.2", "0.009", "0.7", "7.628771884217969", "0.686848628901918", "5.097"),
    ("M14", "0.405", 5831, "61.0", "29.1", "0.022", "0.7", "6.345643373836174", "0.563184987802125", "4.157"),
    ("M15", "0.403", 5313, "72.0", "28.4", "0.009", "1.0", "7.248698664876443", "0.674180501076417", "4.57"),
    ("M16", "0.408", 5313, "81.7", "25.4", "0.022", "0.7", "6.352876838382236", "0.608168073355355", "4.032"),
    ("M18", "0.612", 3868, "81.7", "25.4", "0.022", "0.7", "5.1228826543437975", "0.520369657852149", "2.795"),
    ("M19", "0.613", 4272, "50.3", "26.5", "0.013", "0.7", "5.8690127846242595", "0.54746721449634", "3.325"),
    ("M20", "0.616", 4272, "40.5", "28.0", "0.017", "0.55", "5.965465083834044", "0.548135434935723", "3.443"),
    ("M21", "0.626", 4567, "49.3", "28.6", "0.013", "1.0", "5.399943558248553", "0.537133848549752", "3.028"),
    ("M22", "0.592", 5831, "62.3", "32.7", "0.022", "0.7", "4.571090431224639", "0.365804776022978", "2.947"),
    ("M23", "0.625", 5313, "40.1", "32.8", "0.022", "0.7", "5.126457006211051", "0.361009592202934", "2.998"),
    ("M24", "0.587", 5313, "82.4", "28.9", "0.022", "0.7", "4.5", "0.348800321459478", "2.606"),
    ("M25", "0.796", 5831, "40.5", "28.0", "0.017", "0.55", "2.8237359432941567", "0.295820398780028", "2.8"),
    ("M26", "0.787", 5831, "40.1", "32.8", "0.022", "0.7", "2.557585353879815", "0.269260611304518", "1.437"),
    ("M27", "0.752", 4272, "49.3", "28.6", "0.013", "1.0", "4.023923312191393", "0.416046166094955", "1.973"),
    ("M28", "0.746", 4272, "60.6", "25.1", "0.022", "0.7", "3.4209890720373504", "0.363008253199657", "1.674"),
    ("M29", "0.777", 4567, "62.3", "32.7", "0.022", "0.7", "2.34241198112558", "0.251138743400015", "1.077"),
    ("M30", "0.785", 4567, "72.1", "26.7", "0.013", "0.7", "3.210149103172675", "0.330165571538312", "1.319"),
    ("M31", "0.788", 5313, "82.4", "28.9", "0.022", "0.7", "2.360327423327017", "0.283321968957196", "1.127"),
    ("M32", "0.793", 5313, "81.3", "32.8", "0.022", "0.7", "1.983006386758969", "0.245775244556189", "0.956"),
]


def default_samples() -> List[Dict[str, Any]]:
    return [dict(zip(SEED_FIELDS, row)) for row in DEFAULT_SAMPLES]


def seed_default_samples(db: Session, group_name: str) -> int:
    """
    Insert the reference samples into ``group_name`` if no samples exist yet.

    Returns:
        Number of samples inserted (0 when the table already had data)
    """
    store = SampleStore(db)
    if store.count() > 0:
        return 0
    created = store.create_many(group_name, default_samples())
    db.commit()
    logger.info(f"Seeded {len(created)} default samples into group '{group_name}'")
    return len(created)
