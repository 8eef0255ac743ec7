"""Run with: python -m wellness_plan_solver"""

import uvicorn

from wellness_plan_solver.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "wellness_plan_solver.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
