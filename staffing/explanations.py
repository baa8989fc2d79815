"""
Plain-language match explanations
"""
from database.models import Employee, Project


def build_match_explanation(project: Project, employee: Employee) -> str:
    """
    Deterministic summary of why an employee fits a project.

    The percentage here counts required skills the employee holds at any
    level, which is coarser than the Matcher's level-weighted score.
    """
    required = [req.skill for req in project.requirements]
    held = {skill.name for skill in employee.skills}
    matched = [name for name in required if name in held]

    percentage = int(len(matched) / len(required) * 100 + 0.5) if required else 0

    parts = [f"{employee.full_name} is a {percentage}% match for this project."]
    if matched:
        parts.append(f"They have the required skills: {', '.join(matched)}.")
    if employee.availability == 'available':
        parts.append("They are currently available for new projects.")
    parts.append(
        f"With {len(employee.skills)} total skills and a performance score of "
        f"{employee.performance_score}, they would be a valuable addition to this project."
    )
    return ' '.join(parts)
