#!/usr/bin/env python3
"""
Seed script for the EcoTracker database.
This script creates the tables and populates the standing community challenges.
"""

import sys
from app import create_app
from extensions import db
from models import init_default_challenges, CommunityChallenge


def seed_default_challenges():
    """Seed the database with the default community challenges."""
    print("🌱 Starting database seeding...")

    app = create_app()

    with app.app_context():
        try:
            db.create_all()
            print("✅ Database tables created/verified")

            initial_count = CommunityChallenge.query.filter_by(is_active=True).count()
            print(f"📊 Active community challenges in database: {initial_count}")

            print("🔄 Adding default challenges...")
            init_default_challenges()

            final_count = CommunityChallenge.query.filter_by(is_active=True).count()
            print("✅ Seeding completed successfully!")
            print(f"📈 Added {final_count - initial_count} new challenges")

            print("\n📋 Active community challenges:")
            for challenge in CommunityChallenge.query.filter_by(is_active=True).order_by(CommunityChallenge.end_date):
                print(f"   • {challenge.title} ({challenge.category}) - goal {challenge.goal:g}, ends {challenge.end_date}")

        except Exception as e:
            print(f"❌ Error during seeding: {e}")
            db.session.rollback()
            sys.exit(1)


def clear_challenges():
    """Deactivate all community challenges."""
    app = create_app()

    with app.app_context():
        try:
            count = CommunityChallenge.query.filter_by(is_active=True).update({'is_active': False})
            db.session.commit()
            print(f"🗑️  Deactivated {count} community challenges")

        except Exception as e:
            print(f"❌ Error clearing challenges: {e}")
            db.session.rollback()
            sys.exit(1)


def main():
    """Main function to handle command line arguments."""
    if len(sys.argv) > 1:
        if sys.argv[1] == '--clear':
            print("🗑️  Clearing community challenges...")
            clear_challenges()
            return
        elif sys.argv[1] == '--help' or sys.argv[1] == '-h':
            print("EcoTracker Database Seeder")
            print("Usage:")
            print("  python seed.py          - Seed default community challenges")
            print("  python seed.py --clear  - Deactivate community challenges")
            print("  python seed.py --help   - Show this help message")
            return
        else:
            print(f"❌ Unknown argument: {sys.argv[1]}")
            print("Use 'python seed.py --help' for usage information")
            sys.exit(1)

    seed_default_challenges()


if __name__ == '__main__':
    main()
