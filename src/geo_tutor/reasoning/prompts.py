"""Prompt templates for step-by-step geometry solutions.

The schema is embedded in the prompt rather than enforced through the
provider's structured-output mode, so the model is free to reason in a
<thinking> section before emitting the <json> data section. A side
effect is that models sometimes echo the schema back, which is why the
extractor anchors on value-shaped keys.
"""

from __future__ import annotations

import json

THINKING_TAG = "thinking"
DATA_TAG = "json"

SAMPLE_PROBLEM = (
    "Find the volume of a square pyramid with base side length 4 and height 6. "
    "Show the triangle used to find the slant height if needed."
)

DEFAULT_LINE_COLOR = "#57534e"
ACTIVE_COLORS = ("#f59e0b", "#0ea5e9")

_XYZ = {
    "x": {"type": "NUMBER"},
    "y": {"type": "NUMBER"},
    "z": {"type": "NUMBER"},
}

SOLUTION_SCHEMA: dict = {
    "type": "OBJECT",
    "properties": {
        "problemSummary": {
            "type": "STRING",
            "description": "A concise summary of the problem.",
        },
        "finalAnswer": {"type": "STRING", "description": "The final result."},
        "steps": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "stepId": {"type": "INTEGER"},
                    "title": {
                        "type": "STRING",
                        "description": "Short title of the step.",
                    },
                    "description": {
                        "type": "STRING",
                        "description": "Detailed explanation.",
                    },
                    "mathExpression": {
                        "type": "STRING",
                        "description": "Key math formula for this step.",
                    },
                    "visuals": {
                        "type": "OBJECT",
                        "properties": {
                            "points": {
                                "type": "ARRAY",
                                "items": {
                                    "type": "OBJECT",
                                    "properties": {
                                        **_XYZ,
                                        "label": {"type": "STRING"},
                                        "color": {"type": "STRING"},
                                    },
                                    "required": ["x", "y", "z", "label"],
                                },
                            },
                            "lines": {
                                "type": "ARRAY",
                                "items": {
                                    "type": "OBJECT",
                                    "properties": {
                                        "from": {
                                            "type": "STRING",
                                            "description": "Label of start point",
                                        },
                                        "to": {
                                            "type": "STRING",
                                            "description": "Label of end point",
                                        },
                                        "label": {"type": "STRING"},
                                        "color": {"type": "STRING"},
                                        "dashed": {"type": "BOOLEAN"},
                                    },
                                    "required": ["from", "to"],
                                },
                            },
                            "polygons": {
                                "type": "ARRAY",
                                "items": {
                                    "type": "OBJECT",
                                    "properties": {
                                        "points": {
                                            "type": "ARRAY",
                                            "items": {"type": "STRING"},
                                        },
                                        "color": {"type": "STRING"},
                                        "opacity": {"type": "NUMBER"},
                                    },
                                    "required": ["points"],
                                },
                            },
                            "cameraLookAt": {"type": "OBJECT", "properties": _XYZ},
                        },
                        "required": ["points", "lines"],
                    },
                },
                "required": ["stepId", "title", "description", "visuals"],
            },
        },
    },
    "required": ["problemSummary", "steps", "finalAnswer"],
}


def schema_description() -> str:
    """Pretty-printed schema, as embedded in the prompt."""
    return json.dumps(SOLUTION_SCHEMA, indent=2)


def build_solve_prompt(problem_text: str, has_image: bool = False) -> str:
    """Build the tutor prompt asking for <thinking> then <json> output."""
    image_hint = ""
    if has_image:
        image_hint = (
            "A visual representation of the problem has been provided. "
            "Analyze the image carefully to extract the geometric data.\n"
        )

    return f"""You are an expert mathematics and geometry tutor.
Solve the following problem step-by-step.

{image_hint}PROBLEM DESCRIPTION: "{problem_text}"

FORMAT INSTRUCTIONS:
1. First, analyze the problem and plan the solution inside a <{THINKING_TAG}> tag.
   - Explain your geometric reasoning, coordinate calculations, and step planning.
   - Show your work for setting up the 3D coordinates.
   - This section is shown to the user live while you work.

2. Then, provide the final structured solution inside a <{DATA_TAG}> tag.
   - The JSON must strictly follow this schema:
{schema_description()}

CRITICAL INSTRUCTION FOR VISUALS:
- You MUST provide a 3D coordinate system representation for each step.
- Assume the scene is roughly within a 10x10x10 cube centered at (0,0,0).
- If it is a 2D problem, set z=0 for all points.
- 'points' defines vertices.
- 'lines' defines edges connecting vertices by label.
- Update the visual state in each step to highlight what is being calculated.
- Use clear colors. Default lines '{DEFAULT_LINE_COLOR}' (grey), active elements '{ACTIVE_COLORS[0]}' (amber) or '{ACTIVE_COLORS[1]}' (cyan).
"""
