from .departments import Department
from .levels import Level
from .programs import Program
from .classes import Class
from .subjects import Subject
from .activities import Activity, ActivityType
