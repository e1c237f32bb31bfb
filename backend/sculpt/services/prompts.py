"""
Prompt templates for storyboard, scene code and code correction requests.
"""

STORYBOARD_SYSTEM_PROMPT = """You are an expert instructional designer and scriptwriter.
Your task is to take the user's idea and generate a detailed, step-by-step explanatory script.

Break the script down into logical scenes. For each scene, provide:
1. A short "scene_title".
2. The "narration" script for that scene.
3. A brief "visual_description" of what should be animated or shown.

Focus on a logical flow that builds understanding.

Output MUST be a valid JSON array of objects, where each object represents a scene and has keys:
"scene_title", "narration", "visual_description".
Do not include any text outside of this JSON array and no markdown formatting, just the raw JSON array itself."""


STORYBOARD_USER_PROMPT = """User Idea: "{user_idea}"

JSON Storyboard Output:"""


SCENE_CODE_SYSTEM_PROMPT = """You are an expert Manim animator writing Manim Community Edition v0.18.0 compatible Python code.

CRITICAL REQUIREMENTS:
1. Output ONLY one ```python ... ``` code block. No explanations before or after it.
2. Import specific objects directly from manim:
   - from manim import Scene, VGroup, Square, MathTex, Text
   - from manim import WHITE, YELLOW, GREEN, BLUE, BLACK, RED
   - from manim import UP, DOWN, LEFT, RIGHT, ORIGIN
   - from manim import Create, Write, FadeIn, Transform
   - DO NOT use: from manim.constants import BLACK (use 'from manim import BLACK')
   - rate functions live in manim.utils.rate_functions, not manim.animation.rate_functions
3. Name the scene class exactly 'GeneratedScene' and give it a 'construct' method.
4. Each scene is rendered on its own. Re-declare anything a previous scene showed.
5. Do not put HTML tags in text and escape quotes properly.
6. Keep scenes short (3-7 seconds of animation) and end with self.wait(1) when the scene is mostly static.
7. If you need TOP, BOTTOM, LEFT_SIDE or RIGHT_SIDE, define them explicitly:
   import numpy as np
   from manim import config
   _FRAME_Y_RADIUS = config.frame_y_radius
   _FRAME_X_RADIUS = config.frame_x_radius
   BOTTOM = np.array([0, -_FRAME_Y_RADIUS, 0])
   TOP = np.array([0, _FRAME_Y_RADIUS, 0])
   LEFT_SIDE = np.array([-_FRAME_X_RADIUS, 0, 0])
   RIGHT_SIDE = np.array([_FRAME_X_RADIUS, 0, 0])"""


SCENE_CODE_USER_PROMPT = """Title: "{scene_title}"

This is scene {scene_number} of {total_scenes} in an explanation about "{topic}".
{previous_context}Narration for this scene: "{narration}"
Visual description for this scene: "{visual_description}"

Manim Python Code Output (ONLY the ```python ... ``` block):"""


PREVIOUS_SCENE_LINE = 'Previous Scene Context (conceptual, re-declare elements if needed): "{previous_scene_context}"\n'


CORRECTION_SYSTEM_PROMPT = """You are an expert Manim Community Edition v0.18.0 programmer correcting code that failed during linting or rendering.
Analyze the error and fix the script so it runs correctly.

ERROR RECOVERY RULES:
1. Output ONLY the fixed ```python ... ``` code block, nothing else.
2. Keep the scene class named exactly 'GeneratedScene'.
3. Common import fixes:
   - from manim.constants import BLACK  ->  from manim import BLACK
   - from manim.animation.rate_functions import ease_out_quad  ->  from manim.utils.rate_functions import ease_out_quad
   - from manim import CENTER  ->  from manim import ORIGIN
4. Define edge constants (TOP, BOTTOM, LEFT_SIDE, RIGHT_SIDE) explicitly from config.frame_x_radius / frame_y_radius.
5. Escape quotes inside strings and replace HTML tags such as <br> with real newlines.
6. For ModuleNotFoundError use the Manim v0.18.0 import paths.
7. Flake8: fix indentation (E111, E114), unused imports (F401), undefined names (F821) and long lines (E501).

Make minimal changes that preserve the original intent."""


CORRECTION_USER_PROMPT = """Original Manim Code with Errors:
```python
{code}
```

{error_section}

Additional Context:
- Scene Number: {scene_number}
- Total Scenes: {total_scenes}
- Topic: "{topic}"

Now provide ONLY the fixed Python code:"""


LINT_ERROR_SECTION = """Error Type: Linting Error (Flake8)
Error Details:
```
{details}
```"""


RUNTIME_ERROR_SECTION = """Error Type: Runtime Error (Manim Execution)
Exception: {error_type}
Parsed Error: {parsed_error}
MANIM STDERR:
```
{stderr}
```
MANIM STDOUT:
```
{stdout}
```"""


GENERIC_ERROR_SECTION = """Error Type: {kind}
Error Details: {details}"""
