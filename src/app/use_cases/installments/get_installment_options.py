"""GetInstallmentOptions Use Case

Payment cadences a customer may choose from at checkout.
"""

from libs.result import Result, Return
from src.app.repositories.installment_repository import InstallmentRepository
from src.domain.installment import PlanType
from .dtos import (
    GetInstallmentOptionsCommandDTO,
    InstallmentOptionDTO,
    InstallmentOptionsDTO,
)
from . import policy


class GetInstallmentOptions:
    """
    Use Case: List installment options for a booking

    Business Rules:
    1. Paying in full is always offered
    2. Weekly/monthly are offered when their threshold is met and they yield
       at least 2 installments
    3. The cadence the policy selects (monthly over weekly) is recommended
    4. Tenants without a config get the default policy
    """

    def __init__(self, installment_repo: InstallmentRepository):
        self.installment_repo = installment_repo

    async def execute(self, command: GetInstallmentOptionsCommandDTO) -> Result[InstallmentOptionsDTO]:
        config = await self.installment_repo.get_config(command.tenant_id) or policy.default_config()

        installable, upfront = policy.split_basis(config.what_gets_split, command.breakdown)
        total = installable + upfront
        selected = policy.eligible_plan_type(command.rental_days, config)

        options = [
            InstallmentOptionDTO(
                plan_type=PlanType.FULL,
                number_of_installments=1,
                installment_amount=installable,
                installable_amount=installable,
                upfront_amount=upfront,
                total_amount=total,
                recommended=selected is None,
            )
        ]

        if config.enabled:
            for plan_type in (PlanType.WEEKLY, PlanType.MONTHLY):
                if not policy.meets_threshold(plan_type, command.rental_days, config):
                    continue

                count, amount, _, _ = policy.option_amounts(
                    plan_type, command.rental_days, config, command.breakdown
                )
                if count < 2:
                    continue

                options.append(
                    InstallmentOptionDTO(
                        plan_type=plan_type,
                        number_of_installments=count,
                        installment_amount=amount,
                        installable_amount=installable,
                        upfront_amount=upfront,
                        total_amount=total,
                        recommended=plan_type == selected,
                    )
                )

        if not any(option.recommended for option in options):
            options[0].recommended = True

        return Return.ok(
            InstallmentOptionsDTO(
                rental_days=command.rental_days,
                eligible_plan_type=selected,
                options=options,
            )
        )
