# ============================================================================
# Seed Question Bank (Sample Data)
# ============================================================================
"""
Script to seed sample categories and questions into the database so a
revision session can be started locally.

Usage:
    python scripts/seed_questions.py
"""

import asyncio
import sys
import os

# Ensure the app directory is in the python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.database import async_session_maker, engine, Base
from app.models.question import Category, Question
from sqlalchemy import select

SEED_DATA = [
    {
        "name": "Signalling",
        "icon": "traffic-cone",
        "category_type": "operations",
        "questions": [
            {
                "title": "What does a red aspect on a main signal require the driver to do?",
                "answers": ["Stop before the signal", "Proceed at reduced speed", "Sound the horn and proceed"],
                "correct": ["A"],
            },
            {
                "title": "Which of these aspects authorise the train to pass the signal?",
                "answers": ["Green", "Red", "Double yellow", "Flashing red"],
                "correct": ["A", "C"],
            },
        ],
    },
    {
        "name": "Track safety",
        "icon": "hard-hat",
        "category_type": "safety",
        "questions": [
            {
                "title": "What must a lookout carry when protecting a work site on the track?",
                "answers": ["A whistle or horn", "A high-visibility vest", "A tool bag", "A timetable"],
                "correct": ["A", "B"],
            },
            {
                "title": "What is the minimum warning time before a train reaches a work site?",
                "answers": ["5 seconds", "The time needed to reach a safe position", "No warning needed"],
                "correct": ["B"],
            },
        ],
    },
]

async def seed_questions():
    print("Starting question bank seeding...")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_maker() as db:
        for category_data in SEED_DATA:
            result = await db.execute(select(Category).where(Category.name == category_data["name"]))
            category = result.scalar_one_or_none()

            if category:
                print(f"  [SKIP] Category '{category.name}' already exists.")
                continue

            category = Category(
                name=category_data["name"],
                icon=category_data["icon"],
                category_type=category_data["category_type"],
            )
            db.add(category)

            for q in category_data["questions"]:
                labels = "ABCDEF"[:len(q["answers"])]
                question = Question(
                    title=q["title"],
                    answers=[
                        {"id": label, "type": "text", "text": text}
                        for label, text in zip(labels, q["answers"])
                    ],
                    correct_answers=q["correct"],
                    categories=[category],
                )
                db.add(question)

            print(f"  [CREATE] Category '{category.name}' with {len(category_data['questions'])} questions.")

        await db.commit()
        print("\nQuestion bank seeding completed successfully!")

if __name__ == "__main__":
    asyncio.run(seed_questions())
