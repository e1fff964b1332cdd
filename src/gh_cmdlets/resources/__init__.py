"""Commands for individual GitHub resources."""

from gh_cmdlets.resources.branch_protection import (
    BranchProtectionError,
    get_branch_pattern_protection_rule,
    get_branch_protection_rule,
    new_branch_pattern_protection_rule,
    new_branch_protection_rule,
    remove_branch_pattern_protection_rule,
    remove_branch_protection_rule,
)
from gh_cmdlets.resources.branches import BranchNotFoundError, get_branches, new_branch, remove_branch
from gh_cmdlets.resources.gist_comments import (
    get_gist_comments,
    new_gist_comment,
    remove_gist_comment,
    set_gist_comment,
)
from gh_cmdlets.resources.gists import (
    add_gist_file,
    add_gist_star,
    copy_gist,
    get_gists,
    new_gist,
    remove_gist,
    remove_gist_file,
    remove_gist_star,
    rename_gist_file,
    set_gist,
    set_gist_file,
    set_gist_star,
    test_gist_star,
)
from gh_cmdlets.resources.issue_comments import (
    get_issue_comments,
    new_issue_comment,
    remove_issue_comment,
    set_issue_comment,
)
from gh_cmdlets.resources.milestones import get_milestones, new_milestone, remove_milestone, set_milestone
from gh_cmdlets.resources.projects import get_projects, new_project, remove_project, set_project

__all__ = [
    "BranchNotFoundError",
    "BranchProtectionError",
    "add_gist_file",
    "add_gist_star",
    "copy_gist",
    "get_branch_pattern_protection_rule",
    "get_branch_protection_rule",
    "get_branches",
    "get_gist_comments",
    "get_gists",
    "get_issue_comments",
    "get_milestones",
    "get_projects",
    "new_branch",
    "new_branch_pattern_protection_rule",
    "new_branch_protection_rule",
    "new_gist",
    "new_gist_comment",
    "new_issue_comment",
    "new_milestone",
    "new_project",
    "remove_branch",
    "remove_branch_pattern_protection_rule",
    "remove_branch_protection_rule",
    "remove_gist",
    "remove_gist_comment",
    "remove_gist_file",
    "remove_gist_star",
    "remove_issue_comment",
    "remove_milestone",
    "remove_project",
    "rename_gist_file",
    "set_gist",
    "set_gist_comment",
    "set_gist_file",
    "set_gist_star",
    "set_issue_comment",
    "set_milestone",
    "set_project",
    "test_gist_star",
]
