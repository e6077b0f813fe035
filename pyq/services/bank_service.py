"""Service layer for stored question banks."""
from fastapi import HTTPException

from pyq.engine.bank import QuestionBank, load_bank_json
from pyq.engine.timer import exam_minutes
from pyq.utils import paths


def load_stored_bank(bank_id: str) -> QuestionBank:
    """Load and validate a question bank from the banks directory."""
    path = paths.bank_path(bank_id)
    if not path.exists():
        raise HTTPException(status_code=404, detail="Question bank not found")
    return load_bank_json(path.read_text(encoding="utf-8"))


def list_bank_ids() -> list[str]:
    """IDs of all stored banks, sorted."""
    directory = paths.banks_dir()
    if not directory.is_dir():
        return []
    return sorted(path.stem for path in directory.glob("*.json") if path.is_file())


def serialize_bank_metadata(bank_id: str, bank: QuestionBank) -> dict[str, object]:
    paper = bank.paper
    return {
        "id": bank_id,
        "name": paper.name,
        "year": paper.year,
        "session": paper.session,
        "questionCount": bank.question_count,
        "totalDisplayCount": bank.total_display_count,
        "totalMarks": bank.total_marks,
        "examMinutes": exam_minutes(paper),
    }
