"""
Register Employee Use Case

Provisions an employee record with a bcrypt-hashed access code.
"""

import logging

import bcrypt

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import Employee

from .dtos import RegisterEmployeeCommand, RegisterEmployeeResponse, summarize_employee

logger = logging.getLogger(__name__)


class RegisterEmployeeUseCase:
    """
    Use case for adding an employee to the credential store.

    Business Rules:
    - EN code and email must be unique
    - Access code is never stored in plain text
    - New employees start active, with is_first_login set
    """

    def __init__(self, uow: UnitOfWork, bcrypt_rounds: int = 12):
        self.uow = uow
        self.bcrypt_rounds = bcrypt_rounds

    async def execute(self, command: RegisterEmployeeCommand) -> Result[RegisterEmployeeResponse]:
        email = command.email.lower()

        async with self.uow:
            if await self.uow.employees.get_by_en_code(command.en_code):
                return Return.err(
                    Error("DUPLICATE_EN_CODE", "EN code is already assigned")
                )

            if await self.uow.employees.get_by_email(email):
                return Return.err(Error("DUPLICATE_EMAIL", "Email is already registered"))

            access_code_hash = bcrypt.hashpw(
                command.access_code.encode(), bcrypt.gensalt(self.bcrypt_rounds)
            )

            employee = Employee(
                en_code=command.en_code,
                access_code_hash=access_code_hash.decode(),
                full_name=command.full_name,
                email=email,
                phone_number=command.phone_number,
                designation=command.designation,
                department=command.department,
            )
            employee = await self.uow.employees.create(employee)
            await self.uow.commit()

        logger.info(f"Registered employee {employee.id} with EN code {employee.en_code}")
        return Return.ok(RegisterEmployeeResponse(employee=summarize_employee(employee)))
