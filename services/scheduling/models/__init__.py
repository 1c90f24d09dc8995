from .sessions import Session
