# paths.py

from pathlib import Path

# Rotkatalogen för projektet (denna fil ligger i rotkatalogen)
ROOT = Path(__file__).parent

# Underkataloger inom projektet
DATA_DIR = ROOT / "Data"

# Hämtar sökvägen till en fil i Data-katalogen
def data_file(filename: str) -> Path:
    return DATA_DIR / filename
