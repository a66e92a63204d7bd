import logging
import sys


class ContextFormatter(logging.Formatter):
    """Custom formatter that handles optional job_id and stage fields."""
    def format(self, record):
        # Add default values for job_id and stage if not present
        if not hasattr(record, 'job_id'):
            record.job_id = '-'
        if not hasattr(record, 'stage'):
            record.stage = '-'
        return super().format(record)


def configure_logging(level: int = logging.INFO, stream=None) -> None:
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(ContextFormatter(
        "%(asctime)s %(levelname)s %(name)s [job_id=%(job_id)s stage=%(stage)s] - %(message)s"
    ))
    logging.basicConfig(
        level=level,
        handlers=[handler],
        force=True,
    )


def job_context(job_id: str, stage: object = "-") -> dict:
    """``extra=`` payload for log calls made on behalf of a job."""
    return {"job_id": job_id, "stage": str(stage)}
