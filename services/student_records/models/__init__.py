from .grades import Grade
from .absences import Absence, AbsenceStatus
