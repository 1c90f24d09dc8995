# services/academics/controllers/program_service.py
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from services.academics.controllers import program_associations
from services.academics.models.classes import Class
from services.academics.models.programs import Program
from services.academics.models.subjects import Subject
from services.academics.schemas.programs import ProgramCreate
from shared.crud import exists_by_id, get_or_404, list_all, paginate, save

logger = logging.getLogger(__name__)


async def create_program(db: AsyncSession, payload: ProgramCreate) -> Program:
    program = await save(db, Program(description=payload.description))
    logger.info("Created program %s", program.description)
    return program


async def update_program(db: AsyncSession, program_id, payload: ProgramCreate) -> Program:
    program = await get_or_404(db, Program, program_id, "Program")
    program.description = payload.description
    return await save(db, program)


async def get_program(db: AsyncSession, program_id) -> Program:
    return await get_or_404(db, Program, program_id, "Program")


async def get_program_detail(db: AsyncSession, program_id) -> dict:
    program = await get_or_404(db, Program, program_id, "Program")
    classes = await list_all(db, select(Class).where(Class.program_id == program_id).order_by(Class.name))
    subjects = await list_all(db, select(Subject).where(Subject.program_id == program_id).order_by(Subject.name))
    return {
        "id": program.id,
        "description": program.description,
        "classes": classes,
        "subjects": subjects,
    }


async def delete_program(db: AsyncSession, program_id):
    await program_associations.delete_program(db, program_id)


async def list_programs(db: AsyncSession, page: int, size: int) -> dict:
    return await paginate(db, select(Program).order_by(Program.description), page, size)


async def list_all_programs(db: AsyncSession):
    return await list_all(db, select(Program).order_by(Program.description))


async def program_exists(db: AsyncSession, program_id) -> bool:
    return await exists_by_id(db, Program, program_id)
