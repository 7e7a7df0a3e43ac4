from config.settings import PLATFORM_LABELS

TIMELINE_DURATIONS = {
    "immediate": "1-2 weeks",
    "short_term": "1-3 months",
    "long_term": "3-6 months",
}


def _action(title, description, priority, category, fix, impact, timeline, effort="moderate"):
    return {
        "action_title": title,
        "action_description": description,
        "priority": priority,
        "category": category,
        "fix_instructions": fix,
        "estimated_impact": impact,
        "estimated_effort": effort,
        "status": "pending",
        "timeline": timeline,
    }


class RecommendationEngine:
    """Turns gaps, citation opportunities and knowledge scores into an action plan."""

    def priority_actions(self, content_gaps, citation_opportunities, knowledge) -> list:
        actions = []

        for gap in content_gaps.get("critical_topic_gaps", []):
            actions.append(_action(
                gap["gap_title"], gap["gap_description"], "critical", "content",
                gap["recommended_action"], "high", "immediate",
            ))

        for opportunity in citation_opportunities:
            if opportunity["priority"] != "critical":
                continue
            label = PLATFORM_LABELS.get(opportunity["platform"], opportunity["platform"])
            actions.append(_action(
                f"Improve {label} Presence", opportunity["description"], "high", "citations",
                f"Focus on {label} optimization and content creation", "high", "immediate",
            ))

        for platform in knowledge.get("needs_improvement", []):
            label = PLATFORM_LABELS.get(platform["platform"], platform["platform"])
            actions.append(_action(
                f"Improve {label} Knowledge", platform["recommendation"], "medium", "ai_optimization",
                "Create targeted content optimized for this platform", "medium", "short_term",
            ))

        for gap in content_gaps.get("significant_topic_gaps", []):
            actions.append(_action(
                gap["gap_title"], gap["gap_description"], "medium", "content",
                gap["recommended_action"], "medium", "short_term",
            ))

        for gap in content_gaps.get("thematic_gaps", []):
            actions.append(_action(
                gap["gap_title"], gap["gap_description"], "low", "content",
                gap["recommended_action"], "medium", "long_term", effort="quick",
            ))

        return actions

    @staticmethod
    def implementation_timeline(actions) -> dict:
        timeline = {"immediate": [], "short_term": [], "long_term": []}
        for action in actions:
            item = {
                "title": action["action_title"],
                "duration": TIMELINE_DURATIONS.get(action["timeline"], TIMELINE_DURATIONS["long_term"]),
                "priority": action["priority"],
            }
            if action["timeline"] == "immediate" and action["priority"] == "critical":
                timeline["immediate"].append(item)
            elif action["timeline"] == "short_term" or action["priority"] == "high":
                timeline["short_term"].append(item)
            else:
                timeline["long_term"].append(item)
        return timeline
