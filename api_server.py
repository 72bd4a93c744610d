# ========================
# api_server.py
# ========================

"""
FastAPI Server for the Layoffs Cleaning Pipeline

Provides REST API endpoints for uploading layoffs files, running the pipeline
as background jobs and querying the country/industry breakdown of a job.
"""

import shutil
import logging
import asyncio
import uuid
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional

from fastapi import FastAPI, File, UploadFile, HTTPException, BackgroundTasks, Query
from fastapi.responses import FileResponse
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from layoffs_pipeline.pipeline import CSVReader, DataCleaner, LayoffAnalyzer
from layoffs_pipeline.pipeline.orchestrator import DataPipeline
from layoffs_pipeline.utils.config import Config
from layoffs_pipeline.utils.data_generator import DataGenerator
from layoffs_pipeline.utils.logging_setup import setup_logging
from layoffs_pipeline.utils.job_metadata import JobMetadataManager

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

# Configuration
config = Config()
PROCESSED_DIR = Path(config.DEFAULT_OUTPUT_DIR)
UPLOAD_DIR = Path("data/uploaded")
UPLOAD_DIR.mkdir(parents=True, exist_ok=True)

# Constants
JOB_NOT_FOUND_MSG = "Job not found"
JOB_NOT_COMPLETED_MSG = "Job not completed yet"

job_metadata_manager = JobMetadataManager(
    processed_dir=str(PROCESSED_DIR),
    uploaded_dir=str(UPLOAD_DIR)
)

app = FastAPI(
    title="Layoffs Cleaning Pipeline API",
    description="Upload layoffs data, clean it and query outliers and breakdowns",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def initialize_job_status() -> Dict[str, Dict[str, Any]]:
    """Initialize job status by loading from metadata and discovering existing jobs."""
    job_status = job_metadata_manager.load_job_metadata()

    for job_id, job_data in job_metadata_manager.discover_existing_jobs().items():
        if job_id not in job_status:
            job_status[job_id] = job_data
            logger.info(f"Added discovered job {job_id}: {job_data['filename']}")

    if job_status:
        job_metadata_manager.save_job_metadata(job_status)

    return job_status

# Global state for tracking jobs
job_status: Dict[str, Dict[str, Any]] = initialize_job_status()

def persist_job_status():
    """Save current job status to persistent storage."""
    job_metadata_manager.save_job_metadata(job_status)

def get_completed_job(job_id: str) -> Dict[str, Any]:
    """Look up a job, rejecting unknown or unfinished ones."""
    if job_id not in job_status:
        raise HTTPException(status_code=404, detail=JOB_NOT_FOUND_MSG)

    job = job_status[job_id]
    if job['status'] != 'completed':
        raise HTTPException(status_code=400, detail=JOB_NOT_COMPLETED_MSG)
    return job

class PipelineJobManager:
    """Manages background pipeline jobs."""

    @staticmethod
    def run_pipeline(job_id: str, input_file: str, output_dir: str, chunk_size: int = 1000) -> None:
        """Run pipeline in background thread."""
        try:
            logger.info(f"Starting pipeline job {job_id}")
            job_status[job_id]['status'] = 'processing'
            job_status[job_id]['started_at'] = datetime.now().isoformat()

            pipeline = DataPipeline(
                input_file=input_file,
                output_dir=output_dir,
                chunk_size=chunk_size,
                config=config
            )

            if not pipeline.validate_input():
                raise ValueError("Input file validation failed")

            results = pipeline.run()

            job_status[job_id]['status'] = 'completed'
            job_status[job_id]['completed_at'] = datetime.now().isoformat()
            job_status[job_id]['results'] = results
            persist_job_status()

            logger.info(f"Pipeline job {job_id} completed successfully")

        except Exception as e:
            logger.error(f"Pipeline job {job_id} failed: {e}")
            job_status[job_id]['status'] = 'failed'
            job_status[job_id]['error'] = str(e)
            job_status[job_id]['failed_at'] = datetime.now().isoformat()
            persist_job_status()

    @staticmethod
    def run_sample_pipeline(job_id: str, num_rows: int, chunk_size: int) -> None:
        """Generate a sample dataset, then run the pipeline on it."""
        input_file = job_status[job_id]['input_file']
        try:
            generation_stats = DataGenerator(seed=42).generate_dataset(
                file_path=input_file,
                num_rows=num_rows,
                error_rate=0.15
            )
            job_status[job_id]['generation_stats'] = generation_stats
        except OSError as e:
            logger.error(f"Sample data generation for job {job_id} failed: {e}")
            job_status[job_id]['status'] = 'failed'
            job_status[job_id]['error'] = str(e)
            job_status[job_id]['failed_at'] = datetime.now().isoformat()
            persist_job_status()
            return

        PipelineJobManager.run_pipeline(job_id, input_file, job_status[job_id]['output_dir'], chunk_size)

def _new_job(job_id: str, filename: str, input_file: str, chunk_size: int, job_type: str) -> Dict[str, Any]:
    output_dir = PROCESSED_DIR / job_id
    output_dir.mkdir(parents=True, exist_ok=True)
    job_status[job_id] = {
        'job_id': job_id,
        'filename': filename,
        'status': 'queued',
        'created_at': datetime.now().isoformat(),
        'input_file': input_file,
        'output_dir': str(output_dir),
        'chunk_size': chunk_size,
        'type': job_type
    }
    persist_job_status()
    return job_status[job_id]

@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "Layoffs Cleaning Pipeline API",
        "version": "1.0.0",
        "endpoints": {
            "upload": "/upload - Upload a raw layoffs CSV file",
            "run_pipeline": "/run-pipeline - Run the pipeline on generated sample data",
            "status": "/status/{job_id} - Check job status",
            "jobs": "/jobs - List all jobs",
            "download": "/download/{job_id}?file_type=... - Download an output file",
            "breakdown": "/breakdown/{job_id}?country=...&top_n=... - Top industries of a country",
            "health": "/health - Health check",
            "api_docs": "/docs - API documentation"
        },
        "api_docs_url": "/docs"
    }

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "active_jobs": len([j for j in job_status.values() if j['status'] == 'processing'])
    }

@app.post("/upload")
async def upload_file(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    chunk_size: int = Query(1000, description="Number of rows read per chunk", ge=100, le=10000)
):
    """
    Upload a raw layoffs CSV file and trigger the pipeline.

    Args:
        file: CSV file to upload
        chunk_size: Number of rows read per chunk (100-10000)

    Returns:
        dict: Job ID and status information
    """
    if not file.filename or not file.filename.lower().endswith('.csv'):
        raise HTTPException(status_code=400, detail="Only CSV files are supported")

    try:
        job_id = str(uuid.uuid4())
        file_path = UPLOAD_DIR / f"{job_id}_{file.filename}"
        content = await file.read()

        def write_file():
            with open(file_path, "wb") as buffer:
                buffer.write(content)

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, write_file)

        job = _new_job(job_id, file.filename, str(file_path), chunk_size, 'upload')
        job['file_size'] = len(content)

        background_tasks.add_task(
            PipelineJobManager.run_pipeline,
            job_id,
            str(file_path),
            job['output_dir'],
            chunk_size
        )

        logger.info(f"Started pipeline job {job_id} for file {file.filename}")

        return {
            "job_id": job_id,
            "filename": file.filename,
            "status": "queued",
            "message": "File uploaded successfully. Pipeline processing started.",
            "estimated_processing_info": "Use /status/{job_id} to check progress"
        }

    except OSError as e:
        logger.error(f"Upload failed: {e}")
        raise HTTPException(status_code=500, detail=f"Upload failed: {str(e)}")

@app.post("/run-pipeline")
async def run_sample_pipeline(
    background_tasks: BackgroundTasks,
    num_rows: int = Query(2000, description="Number of sample rows to generate", ge=10, le=1000000),
    chunk_size: int = Query(1000, description="Number of rows read per chunk", ge=100, le=10000)
):
    """
    Run the pipeline on a generated sample dataset (equivalent to main.py).

    Returns:
        dict: Job ID and status information
    """
    job_id = str(uuid.uuid4())
    input_file = str(UPLOAD_DIR / f"{job_id}_generated_layoffs_{num_rows}_rows.csv")
    job = _new_job(job_id, f'generated_layoffs_{num_rows}_rows.csv', input_file, chunk_size, 'sample_pipeline')
    job['num_rows'] = num_rows

    background_tasks.add_task(PipelineJobManager.run_sample_pipeline, job_id, num_rows, chunk_size)

    logger.info(f"Started sample pipeline job {job_id} with {num_rows} rows")

    return {
        "job_id": job_id,
        "type": "sample_pipeline",
        "status": "queued",
        "message": "Sample pipeline started successfully.",
        "parameters": {
            "num_rows": num_rows,
            "chunk_size": chunk_size
        },
        "estimated_processing_info": "Use /status/{job_id} to check progress"
    }

@app.get("/status/{job_id}")
async def get_job_status(job_id: str):
    """
    Get the status of a pipeline job.

    Args:
        job_id: Unique job identifier

    Returns:
        dict: Job status and results
    """
    if job_id not in job_status:
        raise HTTPException(status_code=404, detail=JOB_NOT_FOUND_MSG)

    job = job_status[job_id].copy()

    if job['status'] == 'completed' and 'results' in job:
        results = job['results']
        stage_stats = results.get('stage_stats', {})
        job['summary'] = {
            'records_cleaned': stage_stats.get('output', {}).get('records_cleaned', 0),
            'duplicates_removed': stage_stats.get('deduplication', {}).get('duplicates_removed', 0),
            'outlier_records': results.get('analysis_summary', {}).get('outlier_records', 0),
            'output_files': len(results.get('saved_files', {}))
        }

    return job

@app.get("/jobs")
async def list_jobs(
    status: Optional[str] = Query(None, description="Filter by status: queued, processing, completed, failed"),
    limit: int = Query(50, description="Maximum number of jobs to return", ge=1, le=100)
):
    """
    List all pipeline jobs with optional filtering.

    Returns:
        dict: List of jobs
    """
    jobs = list(job_status.values())

    if status:
        jobs = [job for job in jobs if job['status'] == status]

    jobs.sort(key=lambda x: x.get('created_at') or '', reverse=True)
    jobs = jobs[:limit]

    return {
        "jobs": jobs,
        "total_count": len(job_status),
        "filtered_count": len(jobs)
    }

@app.get("/download/{job_id}")
async def download_results(job_id: str, file_type: str = Query(..., description="Type of file to download")):
    """
    Download an output file of a completed job.

    Args:
        job_id: Unique job identifier
        file_type: Dataset type, e.g. 'cleaned_dataset' or 'industry_outliers'

    Returns:
        FileResponse: The requested file
    """
    job = get_completed_job(job_id)

    saved_files = job.get('results', {}).get('saved_files')
    if not saved_files:
        raise HTTPException(status_code=404, detail="No results available")

    if file_type not in saved_files:
        available_types = list(saved_files.keys())
        raise HTTPException(
            status_code=404,
            detail=f"File type '{file_type}' not found. Available types: {available_types}"
        )

    file_path = Path(saved_files[file_type])
    if not file_path.exists():
        raise HTTPException(status_code=404, detail="File not found on disk")

    return FileResponse(
        path=file_path,
        filename=f"{job_id}_{file_path.name}",
        media_type='application/octet-stream'
    )

@app.get("/breakdown/{job_id}")
async def country_industry_breakdown(
    job_id: str,
    country: str = Query(..., description="Country to report on"),
    top_n: int = Query(5, description="Highest industry rank to include", ge=1, le=100)
):
    """
    Top industries of a country by total layoffs, dense-ranked, computed
    over the cleaned dataset of a completed job.
    """
    job = get_completed_job(job_id)

    cleaned_path = job.get('results', {}).get('saved_files', {}).get('cleaned_dataset')
    if not cleaned_path or not Path(cleaned_path).exists():
        raise HTTPException(status_code=404, detail="Cleaned dataset not found for this job")

    records = CSVReader(cleaned_path).read_staging()
    DataCleaner().normalize(records)
    rows = LayoffAnalyzer(records).country_industry_breakdown(country, top_n)

    return {
        "job_id": job_id,
        "country": country,
        "top_n": top_n,
        "rows": rows
    }

@app.delete("/jobs/{job_id}")
async def delete_job(job_id: str):
    """Delete a job together with its uploaded input and outputs."""
    if job_id not in job_status:
        raise HTTPException(status_code=404, detail=JOB_NOT_FOUND_MSG)

    job = job_status[job_id]
    if job['status'] == 'processing':
        raise HTTPException(status_code=400, detail="Cannot delete a job that is still processing")

    input_file = Path(job.get('input_file', ''))
    if input_file.is_file() and input_file.parent == UPLOAD_DIR:
        input_file.unlink()

    output_dir = Path(job.get('output_dir', ''))
    if output_dir.is_dir() and output_dir.parent == PROCESSED_DIR:
        shutil.rmtree(output_dir)

    del job_status[job_id]
    persist_job_status()
    logger.info(f"Deleted job {job_id}")

    return {"job_id": job_id, "status": "deleted"}

def start_server(host: str = "0.0.0.0", port: int = config.API_PORT, reload: bool = False):
    """Start the FastAPI server."""
    logger.info(f"Starting Layoffs Pipeline API server on {host}:{port}")
    uvicorn.run(
        "api_server:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info"
    )

if __name__ == "__main__":
    start_server(reload=True)
