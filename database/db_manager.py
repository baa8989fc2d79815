"""
Database manager for the Staffing & Assessment directory
"""
import json
import sqlite3
from typing import List, Optional, Dict, Any, Tuple, Iterable
from contextlib import contextmanager
from pathlib import Path
from datetime import datetime

from .models import (
    Employee, Skill, ProjectInvolvement, Project, Requirement,
    ProjectAssignment, ProjectComment, Assessment, Admin
)
from staffing.errors import NotFoundError, AlreadyAssignedError, ValidationError
from staffing.assessor import (
    CATEGORY_KEYS, CategoryScores, ensure_mutable, next_status, validate_transition
)

# category key -> column
SCORE_COLUMNS = {
    'technicalSkills': 'technical_skills',
    'communication': 'communication',
    'leadership': 'leadership',
    'problemSolving': 'problem_solving',
    'teamwork': 'teamwork',
    'adaptability': 'adaptability',
    'timeManagement': 'time_management',
    'creativity': 'creativity',
}

EMPLOYEE_COLUMNS = {
    'first_name', 'last_name', 'email', 'phone', 'position', 'department',
    'hire_date', 'performance_score', 'availability', 'bio', 'strengths',
    'weaknesses', 'is_active'
}
EMPLOYEE_SORTS = {
    'firstName': 'first_name', 'lastName': 'last_name', 'email': 'email',
    'position': 'position', 'department': 'department',
    'performanceScore': 'performance_score', 'hireDate': 'hire_date',
    'availability': 'availability', 'createdAt': 'created_at',
}

PROJECT_COLUMNS = {
    'title', 'description', 'company', 'category', 'budget', 'duration',
    'start_date', 'end_date', 'status', 'priority', 'is_active'
}
PROJECT_SORTS = {
    'title': 'title', 'company': 'company', 'category': 'category',
    'budget': 'budget', 'duration': 'duration', 'startDate': 'start_date',
    'status': 'status', 'priority': 'priority', 'createdAt': 'created_at',
}

ASSESSMENT_FIELDS = {'project_id', 'strengths', 'weaknesses', 'recommendations', 'comments'}
JSON_LIST_COLUMNS = {'strengths', 'weaknesses', 'recommendations', 'permissions'}


def _now() -> str:
    return datetime.now().isoformat(timespec='seconds')


def _to_text(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat(timespec='seconds')
    return value


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _number(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class DatabaseManager:
    """Manages SQLite database operations"""

    def __init__(self, db_path: str = "data/staffing.db"):
        self.db_path = db_path
        self._ensure_db_directory()
        self._initialize_database()

    def _ensure_db_directory(self):
        """Create database directory if it doesn't exist"""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def get_connection(self, immediate: bool = False):
        """
        Context manager for database connections.

        immediate=True takes the write lock up front, so a read-then-write
        sequence cannot interleave with another writer.
        """
        conn = sqlite3.connect(self.db_path, timeout=10)
        conn.row_factory = sqlite3.Row
        try:
            # enforce FK constraints
            conn.execute("PRAGMA foreign_keys = ON;")
            if immediate:
                conn.execute("BEGIN IMMEDIATE")
            yield conn
            conn.commit()
        except Exception as e:
            conn.rollback()
            raise e
        finally:
            conn.close()

    def _initialize_database(self):
        """Initialize database schema"""
        schema_path = Path(__file__).parent / "schema.sql"
        with self.get_connection() as conn:
            with open(schema_path, "r") as f:
                conn.executescript(f.read())

    # ============================================
    # Employee Operations
    # ============================================

    def insert_employee(self, employee: Employee) -> int:
        """Insert a new employee with skills and return the ID"""
        now = _now()
        with self.get_connection() as conn:
            try:
                cursor = conn.execute(
                    """
                    INSERT INTO employees (
                        first_name, last_name, email, phone, position, department,
                        hire_date, performance_score, availability, bio,
                        strengths, weaknesses, is_active, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        employee.first_name,
                        employee.last_name,
                        employee.email.strip().lower(),
                        employee.phone,
                        employee.position,
                        employee.department,
                        _to_text(employee.hire_date) or now,
                        employee.performance_score,
                        employee.availability,
                        employee.bio,
                        json.dumps(employee.strengths),
                        json.dumps(employee.weaknesses),
                        employee.is_active,
                        now,
                        now,
                    ),
                )
            except sqlite3.IntegrityError as e:
                if 'employees.email' in str(e):
                    raise ValidationError(f"Email already registered: {employee.email}", field='email')
                raise
            employee_id = int(cursor.lastrowid)
            self._write_skills(conn, employee_id, employee.skills)
            return employee_id

    def get_employee_by_id(self, employee_id: int, include_inactive: bool = False) -> Optional[Employee]:
        """Get employee by ID"""
        query = "SELECT * FROM employees WHERE id = ?"
        if not include_inactive:
            query += " AND is_active = 1"
        with self.get_connection() as conn:
            row = conn.execute(query, (employee_id,)).fetchone()
            if not row:
                return None
            return self._hydrate_employees(conn, [row])[0]

    def get_employee_by_email(self, email: str) -> Optional[Employee]:
        """Get employee by email address"""
        with self.get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM employees WHERE email = ? AND is_active = 1",
                (email.strip().lower(),),
            ).fetchone()
            if not row:
                return None
            return self._hydrate_employees(conn, [row])[0]

    def list_employees(
        self,
        search: Optional[str] = None,
        department: Optional[str] = None,
        position: Optional[str] = None,
        availability: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: str = 'asc',
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Employee], int]:
        """Search employees by specific criteria, returns (page, total)"""
        where = "WHERE is_active = 1"
        params: List[Any] = []

        if search:
            where += (" AND (first_name LIKE ? OR last_name LIKE ? OR email LIKE ?"
                      " OR position LIKE ? OR department LIKE ?)")
            params.extend([f"%{search}%"] * 5)

        if department:
            where += " AND department = ?"
            params.append(department)

        if position:
            where += " AND position = ?"
            params.append(position)

        if availability:
            where += " AND availability = ?"
            params.append(availability)

        order = self._order_clause(EMPLOYEE_SORTS, sort_by, sort_order)

        with self.get_connection() as conn:
            total = conn.execute(f"SELECT COUNT(*) AS count FROM employees {where}", params).fetchone()['count']
            rows = conn.execute(
                f"SELECT * FROM employees {where} {order} LIMIT ? OFFSET ?",
                params + [limit, (page - 1) * limit],
            ).fetchall()
            return self._hydrate_employees(conn, rows), total

    def list_active_employees(self) -> List[Employee]:
        """The matching pool: every active employee, ordered by id"""
        with self.get_connection() as conn:
            rows = conn.execute("SELECT * FROM employees WHERE is_active = 1 ORDER BY id").fetchall()
            return self._hydrate_employees(conn, rows)

    def update_employee(self, employee_id: int, changes: Dict[str, Any]) -> Employee:
        """Update profile fields; a 'skills' entry replaces the whole skill set"""
        changes = dict(changes)
        skills = changes.pop('skills', None)
        unknown = set(changes) - EMPLOYEE_COLUMNS
        if unknown:
            raise ValidationError(f"Unknown employee fields: {', '.join(sorted(unknown))}",
                                  field=sorted(unknown)[0])

        with self.get_connection(immediate=True) as conn:
            if not conn.execute("SELECT id FROM employees WHERE id = ?", (employee_id,)).fetchone():
                raise NotFoundError('Employee', employee_id)

            if changes:
                if 'email' in changes:
                    changes['email'] = changes['email'].strip().lower()
                try:
                    self._update_row(conn, 'employees', employee_id, changes)
                except sqlite3.IntegrityError as e:
                    if 'employees.email' in str(e):
                        raise ValidationError(f"Email already registered: {changes['email']}", field='email')
                    raise
            else:
                conn.execute("UPDATE employees SET updated_at = ? WHERE id = ?", (_now(), employee_id))

            if skills is not None:
                conn.execute("DELETE FROM employee_skills WHERE employee_id = ?", (employee_id,))
                self._write_skills(conn, employee_id, skills)

            row = conn.execute("SELECT * FROM employees WHERE id = ?", (employee_id,)).fetchone()
            return self._hydrate_employees(conn, [row])[0]

    def deactivate_employee(self, employee_id: int) -> bool:
        """Soft delete"""
        with self.get_connection() as conn:
            cursor = conn.execute(
                "UPDATE employees SET is_active = 0, updated_at = ? WHERE id = ?",
                (_now(), employee_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError('Employee', employee_id)
            return True

    def get_employee_statistics(self) -> Dict[str, Any]:
        with self.get_connection() as conn:
            stats = {}
            row = conn.execute(
                """
                SELECT COUNT(*) AS total,
                       SUM(CASE WHEN availability = 'available' THEN 1 ELSE 0 END) AS available,
                       SUM(CASE WHEN availability = 'busy' THEN 1 ELSE 0 END) AS busy,
                       AVG(performance_score) AS avg_performance
                FROM employees WHERE is_active = 1
                """
            ).fetchone()
            stats['totalEmployees'] = row['total']
            stats['availableEmployees'] = row['available'] or 0
            stats['busyEmployees'] = row['busy'] or 0
            stats['avgPerformance'] = row['avg_performance'] or 0

            cursor = conn.execute(
                """
                SELECT department, COUNT(*) AS count FROM employees
                WHERE is_active = 1 GROUP BY department ORDER BY department
                """
            )
            stats['departmentStats'] = [
                {'department': r['department'], 'count': r['count']} for r in cursor.fetchall()
            ]
            return stats

    # ============================================
    # Project Operations
    # ============================================

    def insert_project(self, project: Project) -> int:
        """Insert a new project with its requirements and return the ID"""
        now = _now()
        with self.get_connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO projects (
                    title, description, company, category, budget, duration,
                    start_date, end_date, status, priority, is_active,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    project.title,
                    project.description,
                    project.company,
                    project.category,
                    project.budget,
                    project.duration,
                    _to_text(project.start_date) or now,
                    _to_text(project.end_date),
                    project.status,
                    project.priority,
                    project.is_active,
                    now,
                    now,
                ),
            )
            project_id = int(cursor.lastrowid)
            self._write_requirements(conn, project_id, project.requirements)
            return project_id

    def get_project_by_id(self, project_id: int, include_inactive: bool = False) -> Optional[Project]:
        query = "SELECT * FROM projects WHERE id = ?"
        if not include_inactive:
            query += " AND is_active = 1"
        with self.get_connection() as conn:
            row = conn.execute(query, (project_id,)).fetchone()
            if not row:
                return None
            return self._hydrate_projects(conn, [row])[0]

    def list_projects(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        category: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: str = 'asc',
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Project], int]:
        where = "WHERE is_active = 1"
        params: List[Any] = []

        if status:
            where += " AND status = ?"
            params.append(status)
        if priority:
            where += " AND priority = ?"
            params.append(priority)
        if category:
            where += " AND category = ?"
            params.append(category)

        order = self._order_clause(PROJECT_SORTS, sort_by, sort_order)

        with self.get_connection() as conn:
            total = conn.execute(f"SELECT COUNT(*) AS count FROM projects {where}", params).fetchone()['count']
            rows = conn.execute(
                f"SELECT * FROM projects {where} {order} LIMIT ? OFFSET ?",
                params + [limit, (page - 1) * limit],
            ).fetchall()
            return self._hydrate_projects(conn, rows), total

    def update_project(self, project_id: int, changes: Dict[str, Any]) -> Project:
        """Update project fields; a 'requirements' entry replaces the list"""
        changes = dict(changes)
        requirements = changes.pop('requirements', None)
        unknown = set(changes) - PROJECT_COLUMNS
        if unknown:
            raise ValidationError(f"Unknown project fields: {', '.join(sorted(unknown))}",
                                  field=sorted(unknown)[0])

        with self.get_connection(immediate=True) as conn:
            if not conn.execute("SELECT id FROM projects WHERE id = ?", (project_id,)).fetchone():
                raise NotFoundError('Project', project_id)

            if changes:
                self._update_row(conn, 'projects', project_id, changes)
            else:
                conn.execute("UPDATE projects SET updated_at = ? WHERE id = ?", (_now(), project_id))

            if requirements is not None:
                conn.execute("DELETE FROM project_requirements WHERE project_id = ?", (project_id,))
                self._write_requirements(conn, project_id, requirements)

            row = conn.execute("SELECT * FROM projects WHERE id = ?", (project_id,)).fetchone()
            return self._hydrate_projects(conn, [row])[0]

    def deactivate_project(self, project_id: int) -> bool:
        """Soft delete"""
        with self.get_connection() as conn:
            cursor = conn.execute(
                "UPDATE projects SET is_active = 0, updated_at = ? WHERE id = ?",
                (_now(), project_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError('Project', project_id)
            return True

    def add_project_comment(self, project_id: int, text: str, author: str = 'Admin') -> ProjectComment:
        now = _now()
        with self.get_connection() as conn:
            if not conn.execute("SELECT id FROM projects WHERE id = ?", (project_id,)).fetchone():
                raise NotFoundError('Project', project_id)
            cursor = conn.execute(
                "INSERT INTO project_comments (project_id, text, author, created_at) VALUES (?, ?, ?, ?)",
                (project_id, text, author, now),
            )
            return ProjectComment(text=text, author=author, created_at=_parse_dt(now),
                                  id=int(cursor.lastrowid))

    def get_project_statistics(self) -> Dict[str, Any]:
        with self.get_connection() as conn:
            stats = {}
            row = conn.execute(
                """
                SELECT COUNT(*) AS total,
                       SUM(CASE WHEN status = 'open' THEN 1 ELSE 0 END) AS open,
                       SUM(CASE WHEN status = 'in-progress' THEN 1 ELSE 0 END) AS in_progress,
                       SUM(CASE WHEN status = 'completed' THEN 1 ELSE 0 END) AS completed,
                       AVG(budget) AS avg_budget
                FROM projects WHERE is_active = 1
                """
            ).fetchone()
            stats['totalProjects'] = row['total']
            stats['openProjects'] = row['open'] or 0
            stats['inProgressProjects'] = row['in_progress'] or 0
            stats['completedProjects'] = row['completed'] or 0
            stats['avgBudget'] = row['avg_budget'] or 0

            cursor = conn.execute(
                """
                SELECT category, COUNT(*) AS count FROM projects
                WHERE is_active = 1 GROUP BY category ORDER BY category
                """
            )
            stats['categoryStats'] = [
                {'category': r['category'], 'count': r['count']} for r in cursor.fetchall()
            ]
            return stats

    # ============================================
    # Assignment Operations
    # ============================================

    def assign_employee(self, project_id: int, employee_id: int, role: str) -> Project:
        """
        Add an employee to a project. The first assignment moves an open
        project to in-progress. Runs as one write-locked transaction.
        """
        now = _now()
        with self.get_connection(immediate=True) as conn:
            project = conn.execute(
                "SELECT * FROM projects WHERE id = ? AND is_active = 1", (project_id,)
            ).fetchone()
            if not project:
                raise NotFoundError('Project', project_id)
            if not conn.execute(
                "SELECT id FROM employees WHERE id = ? AND is_active = 1", (employee_id,)
            ).fetchone():
                raise NotFoundError('Employee', employee_id)

            if conn.execute(
                "SELECT id FROM project_assignments WHERE project_id = ? AND employee_id = ?",
                (project_id, employee_id),
            ).fetchone():
                raise AlreadyAssignedError(project_id, employee_id)

            conn.execute(
                """
                INSERT INTO project_assignments (project_id, employee_id, role, assigned_date)
                VALUES (?, ?, ?, ?)
                """,
                (project_id, employee_id, role, now),
            )
            if project['status'] == 'open':
                conn.execute(
                    "UPDATE projects SET status = 'in-progress', updated_at = ? WHERE id = ?",
                    (now, project_id),
                )
            conn.execute(
                """
                INSERT INTO employee_projects (employee_id, project_id, role, start_date, is_active)
                VALUES (?, ?, ?, ?, 1)
                """,
                (employee_id, project_id, role, now),
            )
            conn.execute("UPDATE employees SET updated_at = ? WHERE id = ?", (now, employee_id))

            row = conn.execute("SELECT * FROM projects WHERE id = ?", (project_id,)).fetchone()
            return self._hydrate_projects(conn, [row])[0]

    def remove_employee(self, project_id: int, employee_id: int) -> Project:
        """
        Take an employee off a project. A project left with no assignments
        goes back to open; the employee's involvement is closed, not deleted.
        """
        now = _now()
        with self.get_connection(immediate=True) as conn:
            if not conn.execute("SELECT id FROM projects WHERE id = ?", (project_id,)).fetchone():
                raise NotFoundError('Project', project_id)
            if not conn.execute("SELECT id FROM employees WHERE id = ?", (employee_id,)).fetchone():
                raise NotFoundError('Employee', employee_id)

            conn.execute(
                "DELETE FROM project_assignments WHERE project_id = ? AND employee_id = ?",
                (project_id, employee_id),
            )
            remaining = conn.execute(
                "SELECT COUNT(*) AS count FROM project_assignments WHERE project_id = ?",
                (project_id,),
            ).fetchone()['count']
            if remaining == 0:
                conn.execute(
                    "UPDATE projects SET status = 'open', updated_at = ? WHERE id = ?",
                    (now, project_id),
                )

            conn.execute(
                """
                UPDATE employee_projects SET is_active = 0, end_date = ?
                WHERE employee_id = ? AND project_id = ? AND is_active = 1
                """,
                (now, employee_id, project_id),
            )
            conn.execute("UPDATE employees SET updated_at = ? WHERE id = ?", (now, employee_id))

            row = conn.execute("SELECT * FROM projects WHERE id = ?", (project_id,)).fetchone()
            return self._hydrate_projects(conn, [row])[0]

    # ============================================
    # Assessment Operations
    # ============================================

    def insert_assessment(self, assessment: Assessment) -> int:
        """Scores, overall score and status are written in a single row insert"""
        now = _now()
        scores = assessment.scores.as_dict()
        columns = [SCORE_COLUMNS[key] for key in CATEGORY_KEYS]
        with self.get_connection() as conn:
            cursor = conn.execute(
                f"""
                INSERT INTO assessments (
                    employee_id, assessor_id, project_id, assessment_date,
                    {', '.join(columns)}, overall_score,
                    strengths, weaknesses, recommendations, comments,
                    status, is_active, created_at, updated_at
                ) VALUES ({', '.join(['?'] * (len(columns) + 13))})
                """,
                (
                    assessment.employee_id,
                    assessment.assessor_id,
                    assessment.project_id,
                    _to_text(assessment.assessment_date) or now,
                    *[scores[key] for key in CATEGORY_KEYS],
                    assessment.overall_score,
                    json.dumps(assessment.strengths),
                    json.dumps(assessment.weaknesses),
                    json.dumps(assessment.recommendations),
                    assessment.comments,
                    assessment.status,
                    assessment.is_active,
                    now,
                    now,
                ),
            )
            return int(cursor.lastrowid)

    def get_assessment_by_id(self, assessment_id: int, include_inactive: bool = False) -> Optional[Assessment]:
        query = "SELECT * FROM assessments WHERE id = ?"
        if not include_inactive:
            query += " AND is_active = 1"
        with self.get_connection() as conn:
            row = conn.execute(query, (assessment_id,)).fetchone()
            return self._row_to_assessment(row) if row else None

    def list_assessments(
        self,
        employee_id: Optional[int] = None,
        project_id: Optional[int] = None,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Assessment], int]:
        where = "WHERE is_active = 1"
        params: List[Any] = []

        if employee_id is not None:
            where += " AND employee_id = ?"
            params.append(employee_id)
        if project_id is not None:
            where += " AND project_id = ?"
            params.append(project_id)
        if status:
            where += " AND status = ?"
            params.append(status)

        with self.get_connection() as conn:
            total = conn.execute(f"SELECT COUNT(*) AS count FROM assessments {where}", params).fetchone()['count']
            rows = conn.execute(
                f"SELECT * FROM assessments {where} ORDER BY assessment_date DESC, id DESC LIMIT ? OFFSET ?",
                params + [limit, (page - 1) * limit],
            ).fetchall()
            return [self._row_to_assessment(r) for r in rows], total

    def update_assessment(
        self,
        assessment_id: int,
        score_changes: Optional[Dict[str, Any]] = None,
        changes: Optional[Dict[str, Any]] = None,
    ) -> Assessment:
        """
        Update an assessment still in draft or submitted. New scores are
        merged into the stored ones and the overall score re-derived in the
        same transaction.
        """
        changes = dict(changes or {})
        unknown = set(changes) - ASSESSMENT_FIELDS
        if unknown:
            raise ValidationError(f"Unknown assessment fields: {', '.join(sorted(unknown))}",
                                  field=sorted(unknown)[0])

        with self.get_connection(immediate=True) as conn:
            row = conn.execute(
                "SELECT * FROM assessments WHERE id = ? AND is_active = 1", (assessment_id,)
            ).fetchone()
            if not row:
                raise NotFoundError('Assessment', assessment_id)
            ensure_mutable(assessment_id, row['status'])

            if score_changes:
                scores = self._row_to_assessment(row).scores.merged(score_changes)
                values = scores.as_dict()
                for key in CATEGORY_KEYS:
                    changes[SCORE_COLUMNS[key]] = values[key]
                changes['overall_score'] = scores.overall_score

            if changes:
                self._update_row(conn, 'assessments', assessment_id, changes)

            row = conn.execute("SELECT * FROM assessments WHERE id = ?", (assessment_id,)).fetchone()
            return self._row_to_assessment(row)

    def advance_assessment(self, assessment_id: int, target: Optional[str] = None) -> Assessment:
        """Move one step along draft -> submitted -> reviewed -> approved"""
        with self.get_connection(immediate=True) as conn:
            row = conn.execute(
                "SELECT * FROM assessments WHERE id = ? AND is_active = 1", (assessment_id,)
            ).fetchone()
            if not row:
                raise NotFoundError('Assessment', assessment_id)

            current = row['status']
            if target is None:
                target = next_status(current)
            else:
                validate_transition(current, target)

            conn.execute(
                "UPDATE assessments SET status = ?, updated_at = ? WHERE id = ?",
                (target, _now(), assessment_id),
            )
            row = conn.execute("SELECT * FROM assessments WHERE id = ?", (assessment_id,)).fetchone()
            return self._row_to_assessment(row)

    def deactivate_assessment(self, assessment_id: int) -> bool:
        """Soft delete, allowed in any status"""
        with self.get_connection() as conn:
            cursor = conn.execute(
                "UPDATE assessments SET is_active = 0, updated_at = ? WHERE id = ?",
                (_now(), assessment_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError('Assessment', assessment_id)
            return True

    def get_average_scores(self, employee_id: Optional[int] = None) -> Dict[str, Any]:
        """Per-category and overall averages over active assessments"""
        averages = ', '.join(
            f"AVG({SCORE_COLUMNS[key]}) AS {SCORE_COLUMNS[key]}" for key in CATEGORY_KEYS
        )
        query = f"SELECT COUNT(*) AS count, {averages}, AVG(overall_score) AS overall_score FROM assessments WHERE is_active = 1"
        params: List[Any] = []
        if employee_id is not None:
            query += " AND employee_id = ?"
            params.append(employee_id)

        with self.get_connection() as conn:
            row = conn.execute(query, params).fetchone()

        if not row['count']:
            return {}
        result = {
            f"avg{key[0].upper()}{key[1:]}": row[SCORE_COLUMNS[key]] for key in CATEGORY_KEYS
        }
        result['avgOverallScore'] = row['overall_score']
        return result

    def get_assessment_statistics(self) -> Dict[str, Any]:
        with self.get_connection() as conn:
            row = conn.execute(
                """
                SELECT COUNT(*) AS total,
                       SUM(CASE WHEN status = 'submitted' THEN 1 ELSE 0 END) AS submitted,
                       SUM(CASE WHEN status = 'reviewed' THEN 1 ELSE 0 END) AS reviewed,
                       SUM(CASE WHEN status = 'approved' THEN 1 ELSE 0 END) AS approved
                FROM assessments WHERE is_active = 1
                """
            ).fetchone()
        return {
            'totalAssessments': row['total'],
            'submittedAssessments': row['submitted'] or 0,
            'reviewedAssessments': row['reviewed'] or 0,
            'approvedAssessments': row['approved'] or 0,
            'avgScores': self.get_average_scores(),
        }

    # ============================================
    # Admin Operations
    # ============================================

    def insert_admin(self, admin: Admin) -> int:
        with self.get_connection() as conn:
            try:
                cursor = conn.execute(
                    """
                    INSERT INTO admins (
                        username, first_name, last_name, email, password_hash,
                        role, permissions, is_active, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        admin.username,
                        admin.first_name,
                        admin.last_name,
                        admin.email.strip().lower(),
                        admin.password_hash,
                        admin.role,
                        json.dumps(admin.permissions),
                        admin.is_active,
                        _now(),
                    ),
                )
            except sqlite3.IntegrityError as e:
                raise ValidationError(f"Admin already exists: {e}", field='username')
            return int(cursor.lastrowid)

    def get_admin_by_username(self, username: str) -> Optional[Admin]:
        with self.get_connection() as conn:
            row = conn.execute("SELECT * FROM admins WHERE username = ?", (username,)).fetchone()
            return self._row_to_admin(row) if row else None

    def get_admin_by_id(self, admin_id: int) -> Optional[Admin]:
        with self.get_connection() as conn:
            row = conn.execute("SELECT * FROM admins WHERE id = ?", (admin_id,)).fetchone()
            return self._row_to_admin(row) if row else None

    def record_admin_login(self, admin_id: int):
        with self.get_connection() as conn:
            conn.execute("UPDATE admins SET last_login = ? WHERE id = ?", (_now(), admin_id))

    # ============================================
    # Helper Methods
    # ============================================

    def _update_row(self, conn: sqlite3.Connection, table: str, row_id: int, changes: Dict[str, Any]):
        """Column names come from the whitelists above, never from callers"""
        values = []
        for column, value in changes.items():
            if column in JSON_LIST_COLUMNS:
                value = json.dumps(list(value or []))
            values.append(_to_text(value))
        assignments = ', '.join(f"{column} = ?" for column in changes)
        conn.execute(
            f"UPDATE {table} SET {assignments}, updated_at = ? WHERE id = ?",
            values + [_now(), row_id],
        )

    def _order_clause(self, allowed: Dict[str, str], sort_by: Optional[str], sort_order: str) -> str:
        if sort_by and sort_by in allowed:
            direction = 'DESC' if sort_order == 'desc' else 'ASC'
            return f"ORDER BY {allowed[sort_by]} {direction}, id ASC"
        return "ORDER BY created_at DESC, id DESC"

    def _write_skills(self, conn: sqlite3.Connection, employee_id: int, skills: Iterable[Skill]):
        for position, skill in enumerate(skills):
            conn.execute(
                """
                INSERT OR REPLACE INTO employee_skills (employee_id, position, name, level, category)
                VALUES (?, ?, ?, ?, ?)
                """,
                (employee_id, position, skill.name, skill.level, skill.category),
            )

    def _write_requirements(self, conn: sqlite3.Connection, project_id: int, requirements: Iterable[Requirement]):
        for position, req in enumerate(requirements):
            conn.execute(
                """
                INSERT INTO project_requirements (project_id, position, skill, level, priority)
                VALUES (?, ?, ?, ?, ?)
                """,
                (project_id, position, req.skill, req.level, req.priority),
            )

    def _hydrate_employees(self, conn: sqlite3.Connection, rows: List[sqlite3.Row]) -> List[Employee]:
        """Convert rows to Employee objects with skills and project history"""
        if not rows:
            return []
        ids = [row['id'] for row in rows]
        marks = ', '.join('?' * len(ids))

        skills: Dict[int, List[Skill]] = {}
        for r in conn.execute(
            f"SELECT * FROM employee_skills WHERE employee_id IN ({marks}) ORDER BY employee_id, position, id",
            ids,
        ):
            skills.setdefault(r['employee_id'], []).append(
                Skill(name=r['name'], level=r['level'], category=r['category'])
            )

        projects: Dict[int, List[ProjectInvolvement]] = {}
        for r in conn.execute(
            f"SELECT * FROM employee_projects WHERE employee_id IN ({marks}) ORDER BY id",
            ids,
        ):
            projects.setdefault(r['employee_id'], []).append(ProjectInvolvement(
                id=r['id'],
                project_id=r['project_id'],
                role=r['role'],
                start_date=_parse_dt(r['start_date']),
                end_date=_parse_dt(r['end_date']),
                performance=r['performance'],
                is_active=bool(r['is_active'])
            ))

        return [
            Employee(
                id=row['id'],
                first_name=row['first_name'],
                last_name=row['last_name'],
                email=row['email'],
                phone=row['phone'],
                position=row['position'],
                department=row['department'],
                hire_date=_parse_dt(row['hire_date']),
                skills=skills.get(row['id'], []),
                performance_score=row['performance_score'],
                availability=row['availability'],
                bio=row['bio'],
                strengths=json.loads(row['strengths']),
                weaknesses=json.loads(row['weaknesses']),
                projects=projects.get(row['id'], []),
                is_active=bool(row['is_active']),
                created_at=_parse_dt(row['created_at']),
                updated_at=_parse_dt(row['updated_at'])
            )
            for row in rows
        ]

    def _hydrate_projects(self, conn: sqlite3.Connection, rows: List[sqlite3.Row]) -> List[Project]:
        if not rows:
            return []
        ids = [row['id'] for row in rows]
        marks = ', '.join('?' * len(ids))

        requirements: Dict[int, List[Requirement]] = {}
        for r in conn.execute(
            f"SELECT * FROM project_requirements WHERE project_id IN ({marks}) ORDER BY project_id, position, id",
            ids,
        ):
            requirements.setdefault(r['project_id'], []).append(
                Requirement(skill=r['skill'], level=r['level'], priority=r['priority'])
            )

        assignments: Dict[int, List[ProjectAssignment]] = {}
        for r in conn.execute(
            f"SELECT * FROM project_assignments WHERE project_id IN ({marks}) ORDER BY id",
            ids,
        ):
            assignments.setdefault(r['project_id'], []).append(ProjectAssignment(
                employee_id=r['employee_id'],
                role=r['role'],
                assigned_date=_parse_dt(r['assigned_date'])
            ))

        comments: Dict[int, List[ProjectComment]] = {}
        for r in conn.execute(
            f"SELECT * FROM project_comments WHERE project_id IN ({marks}) ORDER BY id",
            ids,
        ):
            comments.setdefault(r['project_id'], []).append(ProjectComment(
                id=r['id'],
                text=r['text'],
                author=r['author'],
                created_at=_parse_dt(r['created_at'])
            ))

        return [
            Project(
                id=row['id'],
                title=row['title'],
                description=row['description'],
                company=row['company'],
                category=row['category'],
                requirements=requirements.get(row['id'], []),
                budget=row['budget'],
                duration=row['duration'],
                start_date=_parse_dt(row['start_date']),
                end_date=_parse_dt(row['end_date']),
                status=row['status'],
                priority=row['priority'],
                assigned_employees=assignments.get(row['id'], []),
                comments=comments.get(row['id'], []),
                is_active=bool(row['is_active']),
                created_at=_parse_dt(row['created_at']),
                updated_at=_parse_dt(row['updated_at'])
            )
            for row in rows
        ]

    def _row_to_assessment(self, row: sqlite3.Row) -> Assessment:
        scores = CategoryScores.from_mapping(
            {key: _number(row[SCORE_COLUMNS[key]]) for key in CATEGORY_KEYS}
        )
        return Assessment(
            id=row['id'],
            employee_id=row['employee_id'],
            assessor_id=row['assessor_id'],
            project_id=row['project_id'],
            assessment_date=_parse_dt(row['assessment_date']),
            scores=scores,
            strengths=json.loads(row['strengths']),
            weaknesses=json.loads(row['weaknesses']),
            recommendations=json.loads(row['recommendations']),
            comments=row['comments'],
            status=row['status'],
            is_active=bool(row['is_active']),
            created_at=_parse_dt(row['created_at']),
            updated_at=_parse_dt(row['updated_at'])
        )

    def _row_to_admin(self, row: sqlite3.Row) -> Admin:
        return Admin(
            id=row['id'],
            username=row['username'],
            first_name=row['first_name'],
            last_name=row['last_name'],
            email=row['email'],
            password_hash=row['password_hash'],
            role=row['role'],
            permissions=json.loads(row['permissions']),
            is_active=bool(row['is_active']),
            last_login=_parse_dt(row['last_login'])
        )
