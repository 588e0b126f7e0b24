from fastapi import Depends
from sqlalchemy.orm import Session
from itimock.core.database import get_db
from itimock.stores.sql import SqlPaperStore, SqlQuestionStore

def get_question_store(db: Session = Depends(get_db)) -> SqlQuestionStore:
    return SqlQuestionStore(db)

def get_paper_store(db: Session = Depends(get_db)) -> SqlPaperStore:
    return SqlPaperStore(db)
