"""
Create mock employees and projects for local testing
"""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from database.db_manager import DatabaseManager
from staffing.service import StaffingService
import config


EMPLOYEES = [
    {
        "first_name": "Aroha", "last_name": "Ngata", "email": "aroha.ngata@sample.com",
        "position": "Senior Frontend Developer", "department": "Engineering",
        "performance_score": 88, "availability": "available",
        "skills": [{"name": "React", "level": 9, "category": "Frontend"},
                   {"name": "TypeScript", "level": 8, "category": "Frontend"},
                   {"name": "Figma", "level": 5, "category": "Design"}]
    },
    {
        "first_name": "Ben", "last_name": "Carter", "email": "ben.carter@sample.com",
        "position": "Backend Developer", "department": "Engineering",
        "performance_score": 76, "availability": "busy",
        "skills": [{"name": "Python", "level": 8, "category": "Backend"},
                   {"name": "PostgreSQL", "level": 7, "category": "Backend"},
                   {"name": "Docker", "level": 6, "category": "DevOps"}]
    },
    {
        "first_name": "Chloe", "last_name": "Wu", "email": "chloe.wu@sample.com",
        "position": "Full Stack Developer", "department": "Engineering",
        "performance_score": 82, "availability": "available",
        "skills": [{"name": "Python", "level": 6, "category": "Backend"},
                   {"name": "React", "level": 6, "category": "Frontend"},
                   "Node.js"]
    },
    {
        "first_name": "Daniel", "last_name": "Okafor", "email": "daniel.okafor@sample.com",
        "position": "Data Analyst", "department": "Analytics",
        "performance_score": 71, "availability": "available",
        "skills": [{"name": "SQL", "level": 9, "category": "Data"},
                   {"name": "Python", "level": 5, "category": "Backend"},
                   {"name": "Tableau", "level": 7, "category": "Data"}]
    },
    {
        "first_name": "Emma", "last_name": "Wilson", "email": "emma.wilson@sample.com",
        "position": "UX Designer", "department": "Design",
        "performance_score": 90, "availability": "unavailable",
        "skills": [{"name": "Figma", "level": 10, "category": "Design"},
                   {"name": "User Research", "level": 8, "category": "Design"}]
    },
    {
        "first_name": "Farid", "last_name": "Haddad", "email": "farid.haddad@sample.com",
        "position": "DevOps Engineer", "department": "Platform",
        "performance_score": 79, "availability": "available",
        "skills": [{"name": "Docker", "level": 9, "category": "DevOps"},
                   {"name": "Kubernetes", "level": 8, "category": "DevOps"},
                   {"name": "AWS", "level": 7, "category": "Cloud"}]
    },
]

PROJECTS = [
    {
        "title": "Customer Portal Redesign", "company": "Harbour Bank", "category": "Web Development",
        "description": "Rebuild the customer self-service portal with a new design system.",
        "budget": 120000, "duration": 12, "priority": "high",
        "requirements": [{"skill": "React", "level": 7, "priority": "high"},
                         {"skill": "TypeScript", "level": 6},
                         {"skill": "Figma", "level": 6, "priority": "low"}]
    },
    {
        "title": "Analytics Pipeline", "company": "Kiwi Freight", "category": "Data",
        "description": "Nightly ingestion and reporting over shipment data.",
        "budget": 80000, "duration": 8,
        "requirements": [{"skill": "Python", "level": 7, "priority": "high"},
                         {"skill": "SQL", "level": 8, "priority": "high"},
                         {"skill": "Docker", "level": 5}]
    },
    {
        "title": "Cloud Migration", "company": "Southern Health", "category": "Infrastructure",
        "description": "Move on-prem services to managed containers.",
        "duration": 20, "priority": "urgent",
        "requirements": [{"skill": "Kubernetes", "level": 7, "priority": "high"},
                         {"skill": "AWS", "level": 6},
                         {"skill": "Python", "level": 4, "priority": "low"}]
    },
]


def create_mock_data():
    """Create mock employees and projects for testing"""

    print("🔧 Creating mock staffing data...")

    db = DatabaseManager(config.DATABASE_PATH)
    service = StaffingService(db)

    # Clear existing data, children first
    print("🗑️  Clearing existing data...")
    with db.get_connection() as conn:
        for table in ("assessments", "project_comments", "employee_projects", "project_assignments",
                      "project_requirements", "projects", "employee_skills", "employees"):
            conn.execute(f"DELETE FROM {table}")
    print("  ✅ Database cleared")

    print(f"\n📝 Creating {len(EMPLOYEES)} employees...")
    employee_map = {}
    for data in EMPLOYEES:
        employee = service.create_employee(data)
        employee_map[employee.email] = employee.id
        print(f"  ✅ Created: {employee.full_name} ({employee.position}, {len(employee.skills)} skills)")

    print(f"\n📁 Creating {len(PROJECTS)} projects...")
    project_map = {}
    for data in PROJECTS:
        project = service.create_project(data)
        project_map[project.title] = project.id
        print(f"  ✅ Created: {project.title} for {project.company}")

    print("\n👥 Assigning a starting team...")
    service.assign_employee(project_map["Analytics Pipeline"],
                            employee_map["daniel.okafor@sample.com"], "Lead Analyst")
    print("  ✅ Daniel Okafor → Analytics Pipeline")

    # Print summary
    print("\n" + "=" * 60)
    print("📊 Mock Data Summary")
    print("=" * 60)

    emp_stats = db.get_employee_statistics()
    proj_stats = db.get_project_statistics()
    print(f"Total Employees: {emp_stats['totalEmployees']} ({emp_stats['availableEmployees']} available)")
    print(f"Total Projects: {proj_stats['totalProjects']} ({proj_stats['openProjects']} open)")

    print("\n🎯 Top matches for Customer Portal Redesign:")
    _, matches = service.find_matches(project_map["Customer Portal Redesign"])
    for match in matches[:3]:
        print(f"   {match.employee.full_name}: {match.match_score}%")

    print("\n✅ Mock data created successfully!")
    print("\n💡 You can now:")
    print("   1. Create an admin: python scripts/create_admin.py admin admin@example.com")
    print("   2. Start the server: python scripts/start_server.py")
    print(f"   3. Check health: curl http://localhost:{config.API_PORT}/api/health")

    return True


if __name__ == "__main__":
    try:
        create_mock_data()
    except Exception as e:
        print(f"\n❌ Error creating mock data: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)
