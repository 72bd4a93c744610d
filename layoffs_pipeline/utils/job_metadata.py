# ========================
# layoffs_pipeline/utils/job_metadata.py
# ========================

"""
Job Metadata Management

Handles persistent storage and discovery of pipeline job metadata.
"""

import json
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Dict, Any

from ..pipeline.storage import OUTPUT_FILES

logger = logging.getLogger(__name__)


class JobMetadataManager:
    """Manages persistent job metadata storage."""

    def __init__(self, metadata_file: str = "data/job_metadata.json",
                 processed_dir: str = "data/processed",
                 uploaded_dir: str = "data/uploaded"):
        self.metadata_file = Path(metadata_file)
        self.metadata_file.parent.mkdir(parents=True, exist_ok=True)
        self.processed_dir = Path(processed_dir)
        self.uploaded_dir = Path(uploaded_dir)

    def save_job_metadata(self, job_status_dict: Dict[str, Dict[str, Any]]) -> None:
        """Save all job metadata to persistent storage."""
        try:
            with open(self.metadata_file, 'w') as f:
                json.dump(job_status_dict, f, indent=2, default=str)
            logger.debug(f"Saved job metadata for {len(job_status_dict)} jobs")
        except OSError as e:
            logger.error(f"Failed to save job metadata: {e}")

    def load_job_metadata(self) -> Dict[str, Dict[str, Any]]:
        """Load job metadata from persistent storage."""
        if not self.metadata_file.exists():
            return {}
        try:
            with open(self.metadata_file, 'r') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load job metadata: {e}")
            return {}
        logger.info(f"Loaded metadata for {len(data)} persisted jobs")
        return data

    def discover_existing_jobs(self) -> Dict[str, Dict[str, Any]]:
        """Discover completed jobs from per-job output directories."""
        discovered_jobs = {}

        if not self.processed_dir.exists():
            return discovered_jobs

        for job_dir in self.processed_dir.iterdir():
            if not (job_dir.is_dir() and self._is_valid_uuid(job_dir.name)):
                continue

            job_id = job_dir.name
            input_file = None
            filename = "unknown_file.csv"

            if self.uploaded_dir.exists():
                for uploaded_file in self.uploaded_dir.iterdir():
                    if uploaded_file.name.startswith(job_id):
                        input_file = str(uploaded_file)
                        filename = uploaded_file.name.replace(f"{job_id}_", "")
                        break

            summary_file = job_dir / OUTPUT_FILES['summary']
            status = "completed" if summary_file.exists() else "unknown"
            completed_at = datetime.fromtimestamp(
                summary_file.stat().st_mtime if summary_file.exists()
                else job_dir.stat().st_mtime
            ).isoformat()

            discovered_jobs[job_id] = {
                'job_id': job_id,
                'filename': filename,
                'status': status,
                'created_at': completed_at,  # Use completion time as best guess
                'completed_at': completed_at,
                'input_file': input_file or str(self.uploaded_dir / f"{job_id}_{filename}"),
                'output_dir': str(job_dir),
                'type': 'discovered',
                'discovered_on_startup': True
            }

            if summary_file.exists():
                try:
                    with open(summary_file, 'r') as f:
                        summary_data = json.load(f)
                except (OSError, json.JSONDecodeError) as e:
                    logger.warning(f"Could not read summary for job {job_id}: {e}")
                    continue

                summary_data['saved_files'] = self._get_saved_files(job_dir)
                discovered_jobs[job_id]['results'] = summary_data

        if discovered_jobs:
            logger.info(f"Discovered {len(discovered_jobs)} existing jobs from data directories")

        return discovered_jobs

    def _is_valid_uuid(self, uuid_string: str) -> bool:
        """Check if string is a valid UUID."""
        try:
            uuid.UUID(uuid_string)
            return True
        except ValueError:
            return False

    def _get_saved_files(self, job_dir: Path) -> Dict[str, str]:
        """Get dictionary of saved files for a job."""
        return {
            file_type: str(job_dir / filename)
            for file_type, filename in OUTPUT_FILES.items()
            if (job_dir / filename).exists()
        }
