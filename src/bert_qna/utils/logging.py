import csv
import os
from typing import Dict, Any, List, Optional

ANSWER_FIELDS = ["id", "rank", "text", "start_index", "end_index", "score"]

def ensure_dir(path: str):
    """Create directory if it doesn't exist."""
    if path:
        os.makedirs(path, exist_ok=True)

class CSVLogger:
    def __init__(self, filepath: str, fieldnames: Optional[List[str]] = None):
        """
        Simple CSV logger.
        
        Args:
            filepath: Path to CSV file
            fieldnames: List of column names. If None, defaults to answer fields.
        """
        self.filepath = filepath
        if fieldnames is None:
            fieldnames = ANSWER_FIELDS
        self.fieldnames = fieldnames
        
        if not os.path.exists(filepath):
            ensure_dir(os.path.dirname(filepath))
            with open(filepath, "w", newline="") as f:
                w = csv.DictWriter(f, fieldnames=self.fieldnames, extrasaction='ignore')
                w.writeheader()
        
        self.file = open(filepath, "a", newline="")
        self.writer = csv.DictWriter(self.file, fieldnames=self.fieldnames, extrasaction='ignore')
    
    def log(self, row: Dict[str, Any]):
        """Write a row to the CSV file."""
        self.writer.writerow(row)
        self.file.flush()

    def close(self):
        if self.file and not self.file.closed:
            self.file.close()
    
    def __del__(self):
        """Close file on deletion."""
        if hasattr(self, 'file'):
            self.close()
