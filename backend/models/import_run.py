"""
Import run tracking model.

Every upload leaves one ImportRun row behind, whether it succeeded or
failed, so the upload history of each dataset can be audited.
"""

from enum import Enum
from sqlalchemy import (
    Column, Integer, String, TIMESTAMP, CheckConstraint, Index, text
)

from backend.models.schema import Base, JSONType


class ImportStatus(str, Enum):
    """Import run outcome."""
    SUCCESS = 'success'
    FAILED = 'failed'


class ImportRun(Base):
    """
    Represents one sheet upload.

    Stores what was uploaded, where it went, and how many records were
    parsed and inserted.
    """

    __tablename__ = 'import_runs'
    __table_args__ = (
        CheckConstraint(
            "status IN ('success', 'failed')",
            name='import_runs_status_check'
        ),
        CheckConstraint(
            "kind IN ('inventory', 'price')",
            name='import_runs_kind_check'
        ),
        Index('idx_import_runs_dataset', 'dataset'),
        Index('idx_import_runs_created_at', 'created_at'),
        Index('idx_import_runs_status', 'status'),
        {'comment': 'Upload history'}
    )

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        nullable=False
    )
    warehouse = Column(
        String(255),
        nullable=False,
        comment='Warehouse key given by the client'
    )
    dataset = Column(
        String(255),
        nullable=False,
        comment='Resolved dataset name'
    )
    kind = Column(
        String(20),
        nullable=False,
        comment='Dataset kind: inventory or price'
    )
    filename = Column(
        String(255),
        nullable=True,
        comment='Original upload filename'
    )
    status = Column(
        String(20),
        nullable=False,
        comment='Outcome of the upload'
    )
    parsed = Column(
        Integer,
        nullable=False,
        server_default='0',
        comment='Records extracted from the sheet'
    )
    inserted = Column(
        Integer,
        nullable=False,
        server_default='0',
        comment='Records written to the dataset'
    )
    error = Column(
        JSONType,
        nullable=True,
        comment='Error details if the upload failed'
    )
    created_by = Column(
        String(255),
        nullable=True,
        comment='User or API key that uploaded the file'
    )
    created_at = Column(
        TIMESTAMP,
        server_default=text('CURRENT_TIMESTAMP'),
        nullable=False,
        comment='Upload timestamp'
    )
    completed_at = Column(
        TIMESTAMP,
        nullable=True,
        comment='Completion timestamp'
    )

    def __repr__(self):
        return f"<ImportRun(id={self.id}, dataset='{self.dataset}', status='{self.status}')>"

    def to_dict(self) -> dict:
        """Convert run to dictionary representation."""
        return {
            'id': self.id,
            'warehouse': self.warehouse,
            'dataset': self.dataset,
            'kind': self.kind,
            'filename': self.filename,
            'status': self.status,
            'parsed': self.parsed,
            'inserted': self.inserted,
            'error': self.error,
            'created_by': self.created_by,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None
        }

    def duration_seconds(self) -> float:
        """Calculate run duration in seconds."""
        if self.created_at and self.completed_at:
            delta = self.completed_at - self.created_at
            return delta.total_seconds()
        return 0.0
