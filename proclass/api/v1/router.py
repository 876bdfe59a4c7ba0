# proclass/api/v1/router.py
from fastapi import APIRouter
from proclass.modules.auth.router import router as auth_router
from proclass.modules.users.router import router as users_router
from proclass.modules.students.router import router as students_router
from proclass.modules.payments.router import router as payments_router
from proclass.modules.lessons.router import router as lessons_router
from proclass.modules.classes.router import router as classes_router
from proclass.modules.teacher_payments.router import router as teacher_payments_router
from proclass.modules.whatsapp.router import router as whatsapp_router
from proclass.modules.cron.router import router as cron_router

api_router = APIRouter()

api_router.include_router(auth_router,     prefix="/auth",     tags=["auth"])
api_router.include_router(users_router,    prefix="/users",    tags=["users"])
api_router.include_router(students_router, prefix="/students", tags=["students"])
api_router.include_router(payments_router, prefix="/payments", tags=["payments"])
api_router.include_router(lessons_router,  prefix="/lessons",  tags=["lessons"])
api_router.include_router(classes_router,  prefix="/classes",  tags=["classes"])
api_router.include_router(teacher_payments_router, prefix="/teacher-payments", tags=["teacher-payments"])
api_router.include_router(whatsapp_router, prefix="/whatsapp", tags=["WhatsApp"])
api_router.include_router(cron_router,     prefix="/cron",     tags=["cron"])
