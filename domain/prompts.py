from typing import Any

from domain.models import DishPreferences


CHAT_SYSTEM_PROMPT = (
    "You are a helpful cooking assistant. Focus on recipes, ingredients, "
    "cooking techniques, and food-related topics. "
    "Keep responses concise and practical."
)


CURRENT_DISH_GUIDANCE = """

Current dish context: {title} - {description}

CRITICAL INSTRUCTIONS FOR CURRENT DISH CONTEXT:
- If the user asks to modify this current dish (e.g., 'make this 0 carbs', 'make it vegan', 'add cheese', 'less spicy', 'use my eggplants', 'add to this dish'), DO NOT suggest a new dish.
- Instead, acknowledge that you can modify the current {title} recipe and ask if they want you to apply the changes.
- DO NOT suggest alternative dishes or new recipes when the user wants to modify the current dish.
- Only suggest new dishes when the user explicitly asks for a new recipe or dish idea.
- For modifications, respond with: "I can modify your current {title} based on your request. This will update the recipe. Would you like me to apply this change?\""""


DISH_FORMAT = """Respond in this format:
Dish Name: <name>
Description: <Single sentence only. What is it + 2-3 main ingredients. No marketing language.>
Main Ingredients: <comma-separated list>"""


RANDOM_DISH_PROMPT = f"""Generate a creative, unique dish with no specific restrictions.
{DISH_FORMAT}"""


DIETARY_GUIDANCE = {
    "Low Carb": "Avoid pasta, rice, bread, potatoes, and high-carb vegetables. Use cauliflower, zucchini, or other low-carb alternatives.",
    "Low Fat": "Use lean proteins, minimal oil, and avoid heavy creams, butter, and fatty meats.",
    "Vegan": "No animal products including meat, dairy, eggs, or honey.",
    "Vegetarian": "No meat, but can include dairy and eggs.",
    "Gluten-Free": "No wheat, barley, rye, or gluten-containing ingredients.",
}


PLATE_STYLE_GUIDANCE = {
    "Salad Bowl": "Create a dish that can be served in a bowl with mixed ingredients, greens, and a light dressing.",
    "Comfort Plate": "Create a hearty, warm dish that's satisfying and filling.",
    "Stir Fry Plate": "Create a dish that can be quickly cooked in a wok with vegetables and protein.",
    "Bento Box": "Create a dish that can be portioned into separate compartments with rice, protein, and vegetables.",
    "Wrap": "Create a dish that can be wrapped in a tortilla, flatbread, or lettuce.",
    "Soup / Stew": "Create a liquid-based dish that can be served in a bowl.",
    "Sandwich / Toast": "Create a dish that can be served between bread or on toast.",
    "Finger Food": "Create a dish that can be eaten with hands, like skewers, small bites, or appetizers.",
}


DISH_REQUIREMENTS = """
IMPORTANT:
- The dish MUST respect all dietary restrictions listed above
- The dish MUST incorporate the specified cuisine(s) and/or classic dishes
- The dish MUST be served in the specified plate style
- The dish MUST NOT include any of the avoided ingredients
- If a specific dish is requested, create a variation that fits all preferences
- Be creative but stay true to the requirements
- Do not include ingredients that violate the dietary restrictions
"""


COMPLETE_DISH_FORMAT = """

Respond with a complete recipe in this exact format:

DISH_NAME: <dish name>
DESCRIPTION: <Keep to 1-2 sentences maximum. Focus on what the dish is and 2-3 key ingredients.>
INGREDIENTS:
- <quantity> <ingredient 1> (e.g., "2 cups rice", "1 lb chicken breast", "3 tbsp olive oil")
- <quantity> <ingredient 2>
- <quantity> <ingredient 3>
... (list all ingredients with specific measurements)

INSTRUCTIONS:
1. <step 1>
2. <step 2>
3. <step 3>
... (list all steps)

NUTRITION:
calories: <number>
protein: <number>
carbs: <number>
fat: <number>
fiber: <number>
sugar: <number>
sodium: <number>

ESTIMATED_TIME: <time string>
NOTES: <any additional notes or tips>

CRITICAL REQUIREMENTS:
- The dish MUST respect all dietary restrictions listed above
- The dish MUST incorporate the specified cuisine(s) and/or classic dishes
- The dish MUST be served in the specified plate style
- The dish MUST NOT include any of the avoided ingredients
- The dish MUST include all wanted ingredients specified above
- The dish MUST incorporate wanted styles and characteristics
- The dish MUST be served in the wanted dish type format
- The dish MUST be inspired by wanted classic dishes
- The dish MUST meet wanted dietary requirements
- All ingredients MUST include specific measurements (cups, tablespoons, pounds, ounces, etc.) to make the recipe followable
- Be creative but stay true to all the requirements above"""


SUGGESTION_SUMMARY_PROMPT = """Based on this dish: "{title}", create a brief, engaging chat response that:
1. Introduces the dish concept in 1 sentence
2. Mentions 2-3 key ingredients or features
3. DO NOT ask about loading into the app (that will be handled separately)

IMPORTANT:
- Keep it conversational and under 3 sentences total
- DO NOT include any recipe instructions or steps
- DO NOT include ingredient lists
- DO NOT include nutrition information
- Only mention the dish name, what it is, and 2-3 key ingredients
- Start with "How about..." or similar natural suggestion wording
- DO NOT include "Would you like me to load this into the app" or similar phrases

Example format:
"How about a delicious [dish name] with [ingredient 1], [ingredient 2], and [ingredient 3]?"

Dish name: {title}
Dish description: {description}"""


RECIPE_INFO_PROMPT = """Generate a detailed recipe for "{dish_name}".

IMPORTANT: You must respond with ONLY valid JSON in this exact format:
{{
  "ingredients": ["2 cups rice", "1 lb chicken breast", "3 tbsp olive oil"],
  "instructions": ["step 1", "step 2", "step 3"],
  "nutrition": {{
    "calories": 300,
    "protein": 25,
    "carbs": 30,
    "fat": 12,
    "fiber": 5,
    "sugar": 8,
    "sodium": 400
  }},
  "estimated_time": "30 minutes",
  "description": "A delicious description of the dish"
}}

CRITICAL REQUIREMENTS:
- Response must be ONLY valid JSON, no other text
- All nutrition values must be numbers (no units like "g" or "mg")
- ALL ingredients MUST include specific measurements (cups, tablespoons, pounds, ounces, etc.)
- Include 6-12 ingredients with measurements
- Include 4-8 cooking steps
- Make the recipe realistic and complete
- Do not include any explanatory text outside the JSON
- Example ingredients: "2 cups rice", "1 lb chicken breast", "3 tbsp olive oil", "1/2 tsp salt\""""


RECIPE_CONTEXT = """Current recipe context:
- Dish Name: {dish_name}
- Ingredients: {ingredients}
- Instructions: {instructions}"""


TRANSFORM_RECIPE_PROMPT = """You are transforming an existing recipe for {dish_name} into something completely different. The user wants to: "{modification}"

{context}

CRITICAL INSTRUCTIONS FOR TRANSFORMATIVE CHANGES:
1. **PRESERVE THE DISH'S ESSENCE**: Keep the main flavors, key ingredients, and character of the original dish
2. **ADAPT THE FORMAT**: Change the dish type (e.g., pasta to soup) while maintaining the core concept
3. **UPDATE THE DISH NAME**: Create a new, appropriate name that reflects both the original and the transformation
4. **MAINTAIN KEY INGREDIENTS**: Keep the primary ingredients from the original dish (e.g., if original has shrimp, keep shrimp)
5. **PRESERVE FLAVORS**: Maintain the main flavor profile (e.g., lemon, garlic, herbs)
6. **ADAPT COOKING METHOD**: Modify instructions to match the new dish type while preserving flavors

SPECIAL INSTRUCTIONS FOR DIETARY RESTRICTIONS:
- If the modification includes dietary restrictions (vegan, vegetarian, keto, etc.), you MUST:
  * Replace non-compliant ingredients with suitable alternatives
  * Adjust cooking methods if necessary
  * Update the dish name to reflect the dietary change
  * Ensure all ingredients meet the dietary requirements
  * Update nutrition information to reflect the changes

EXAMPLE TRANSFORMATION:
Original: "Lemon Garlic Shrimp Pasta"
Transform to: "Soup + Diabetic Friendly"
Result: "Lemon Garlic Shrimp Soup" (diabetic-friendly, using shrimp, lemon, garlic, but as soup)

Please provide the transformed recipe in EXACT JSON format (no extra text, just JSON):

{{
  "title": "New Dish Name",
  "description": "Brief description of the transformed dish",
  "ingredients": ["1 lb shrimp", "2 tbsp olive oil", "4 cloves garlic, minced"],
  "instructions": ["Step 1", "Step 2", "Step 3"],
  "nutrition": {{"calories": 300, "protein": 25, "carbs": 15, "fat": 12, "fiber": 3, "sugar": 2, "sodium": 400}},
  "estimated_time": "30 minutes",
  "transformation_summary": "Transformed from pasta to soup while preserving lemon, garlic, and shrimp flavors"
}}

CRITICAL:
- Return ONLY valid JSON, no additional text
- All nutrition values must be numbers without units
- All ingredients must include specific measurements
- Preserve the essence and key ingredients of the original dish
- The transformation_summary should explain what was changed"""


MODIFY_RECIPE_PROMPT = """You are modifying an existing recipe for {dish_name}. The user wants to make this specific change: "{modification}"

{context}

CRITICAL INSTRUCTIONS - READ CAREFULLY:
This is a MINOR MODIFICATION to an existing dish, NOT a new dish creation. You MUST:

1. **PRESERVE THE DISH'S CORE IDENTITY**: Keep the same main ingredients, cooking method, and overall concept
2. **MAKE ONLY THE REQUESTED CHANGE**: If they say "I don't have maple, add a sweetener instead", ONLY replace maple with another sweetener (honey, brown sugar, agave, etc.)
3. **KEEP THE SAME DISH NAME**: Do NOT change the dish title
4. **MAINTAIN THE SAME CUISINE STYLE**: Do NOT change the cultural origin or style
5. **PRESERVE THE MAIN INGREDIENTS**: Keep the primary proteins, vegetables, and starches the same
6. **MINIMAL ADJUSTMENTS**: Only modify what's absolutely necessary for the requested change
7. **PRESERVE ALL MEASUREMENTS**: Keep all ingredient measurements exactly the same unless the substitution requires a different amount
8. **MAINTAIN RECIPE STRUCTURE**: Keep the same number of ingredients and steps unless specifically requested to add/remove
9. **STYLE MODIFICATIONS**: For style changes like "spicy mexican style", add appropriate spices and seasonings while keeping the same main ingredients and cooking method

SPECIFIC EXAMPLES:
- "I don't have maple" → Replace maple with honey/brown sugar/agave, keep everything else identical
- "I don't have bacon" → Replace bacon with similar protein (pancetta, ham, etc.), keep dish concept identical
- "Make it less spicy" → Reduce chili/spice amounts, keep all other ingredients and method identical
- "Add cheese" → Add cheese to existing dish, do NOT turn it into a completely different dish
- "Change to wrap" → Add tortilla/wrap and adjust serving method, keep same ingredients and measurements
- "Make it spicy mexican style" → Add Mexican spices (chili powder, cumin, paprika), jalapeños, lime, cilantro, keep same main ingredients and cooking method
- "Make it italian style" → Add Italian herbs (basil, oregano, thyme), garlic, olive oil, keep same main ingredients and cooking method

WHAT NOT TO DO:
- "I don't have maple" → Do NOT create a completely different dish
- "I don't have bacon" → Do NOT turn it into a vegetarian dish unless specifically requested
- Do NOT reduce ingredient amounts unless specifically requested
- Do NOT change cooking methods unless specifically requested

The modified dish should be recognizable as the SAME dish with only the requested ingredient substitution or minor adjustment.

Please provide the modified recipe in JSON format with these fields:
- "ingredients" (array of strings with measurements)
- "instructions" (array of steps)
- "nutrition" (object with numeric values only, no units: calories, protein, carbs, fat, fiber, sugar, sodium)
- "estimated_time" (string)
- "description" (string)
- "modification_summary" (string describing what changed)

IMPORTANT:
- All nutrition values must be numbers without units (e.g., 30, not "30g")
- All ingredients must include specific measurements (cups, tablespoons, pounds, ounces, etc.)
- Preserve the original dish structure and cooking method
- The modification_summary should explain what was changed (e.g., "Replaced maple syrup with honey", "Added extra cheese")"""


RECIPE_JSON_FORMAT = """{
  "title": "<dish name>",
  "description": "<what the dish is and key features>",
  "ingredients": ["<quantity> <ingredient with measurement>", ...],
  "instructions": ["<step 1>", "<step 2>", ...],
  "nutrition": {"calories": <number>, "protein": <number>, "carbs": <number>, "fat": <number>, "fiber": <number>, "sugar": <number>, "sodium": <number>},
  "estimated_time": "<time string>"
}"""


REMIX_PROMPT = """You are a creative chef with a passion for culinary innovation. The user wants to remix/transform their current dish.

CURRENT DISH:
Title: {title}
Description: {description}
Ingredients: {ingredients}
Instructions: {instructions}

USER REQUEST: "{user_request}"

PREFERENCES (if any):
{preferences}

CRITICAL REMIX INSTRUCTIONS:
1. **DO NOT suggest a random dish** - You MUST remix the current dish based on the user's request
2. **Preserve the dish's essence** - Keep as many original elements as possible while transforming it
3. **Be creative but logical** - The remix should make sense and be delicious
4. **Respect preferences** - If dietary/cuisine preferences are provided, incorporate them
5. **Maintain structure** - If it's a taco, keep it as a taco; if it's a bowl, keep it as a bowl

EXAMPLES OF GOOD REMIXES:
- "Spicy Mango Shrimp Tacos" → "make it a dessert" → "Sweet Mango Dessert Tacos with candied shrimp and coconut cream"
- "Chicken Caesar Salad" → "make it Italian" → "Italian Caesar with prosciutto, parmesan, and balsamic"
- "Beef Stir Fry" → "make it vegan" → "Tofu and Mushroom Stir Fry with the same sauce and vegetables"

RESPOND IN THIS EXACT FORMAT:
---
REMIX_SUMMARY: <1-2 sentences explaining the transformation and why it works>
RECIPE:
{recipe_format}
---

IMPORTANT:
- All nutrition values must be numbers only (no units)
- All ingredients must include specific measurements
- The RECIPE section must be valid JSON
- Focus on the transformation requested, not random suggestions"""


FUSE_PROMPT = """Given this dish as JSON:
{dish}

And this user request: "{modification}"

Suggest a new fusion or modified dish. Respond in this format:
---
SUMMARY: <1-2 sentence intro, no ingredients, no instructions, just what the new dish is and why it's interesting>
RECIPE:
{recipe_format}
---
IMPORTANT: The RECIPE must be valid JSON. Nutrition values must be numbers only, no units."""


IMAGE_PROMPT = (
    "A beautiful hand-drawn illustration of a single food dish, specifically {subject}, "
    "in Japanese retro style, flat colors, grainy texture, minimalist design, "
    "no text or writing or caption on image, no watermark, not a photo, "
    "Subtle lighting with soft shadows. Detailed linework and ornate patterns evoke "
    "a timeless, nostalgic atmosphere. The composition should feel intimate, inviting, "
    "and slightly cinematic, like a hand-drawn or painted scene with refined details."
)


NEGATIVE_IMAGE_PROMPT = (
    "(worst quality:2), (low quality:2), (normal quality:2), (jpeg artifacts), "
    "(blurry), (duplicate), text, writing, watermark, signature, photo, realistic, "
    "3d, cgi, computer generated"
)


def chat_system_prompt(current_dish: dict[str, Any] | None = None) -> str:
    if not current_dish:
        return CHAT_SYSTEM_PROMPT
    return CHAT_SYSTEM_PROMPT + CURRENT_DISH_GUIDANCE.format(
        title=current_dish.get("title") or dish_name(current_dish),
        description=current_dish.get("description", ""),
    )


def dish_prompt(preferences: DishPreferences) -> str:
    lines = ["Generate a creative, unique dish that MUST follow these requirements:", ""]

    if preferences.dietary_restrictions:
        restrictions = ", ".join(preferences.dietary_restrictions).lower()
        lines.append(f"DIETARY REQUIREMENTS: The dish must be {restrictions}.")
        lines.extend(
            f"- {name}: {guidance}"
            for name, guidance in DIETARY_GUIDANCE.items()
            if name in preferences.dietary_restrictions
        )

    if len(preferences.cuisines) == 1:
        lines.append(
            f"CUISINE: The dish should be inspired by {preferences.cuisines[0]} cuisine."
        )
    elif preferences.cuisines:
        lines.append(
            "CUISINE: The dish should be a fusion of "
            f"{' and '.join(preferences.cuisines)} cuisines."
        )

    if preferences.classic_dishes:
        lines.append(
            "SPECIFIC DISHES: The dish should incorporate elements from or be "
            f"inspired by: {', '.join(preferences.classic_dishes)}."
        )

    if preferences.plate_styles:
        lines.append(
            "PLATE STYLE: The dish should be served as a "
            f"{preferences.plate_styles[0].lower()}."
        )
        lines.extend(
            f"- {name}: {guidance}"
            for name, guidance in PLATE_STYLE_GUIDANCE.items()
            if name in preferences.plate_styles
        )

    if preferences.ingredient_preferences:
        lines.append(
            "INGREDIENT PREFERENCES: The dish must NOT include these ingredients: "
            f"{', '.join(preferences.ingredient_preferences)}."
        )

    if preferences.specific_dish:
        lines.append(
            "SPECIFIC DISH REQUEST: The user specifically wants a dish called "
            f'"{preferences.specific_dish}". Create a variation or interpretation of '
            "this dish that respects all the other preferences above."
        )
        if preferences.chat_context:
            lines.append(f"CONTEXT: {preferences.chat_context}")

    return "\n".join(lines) + "\n" + DISH_REQUIREMENTS + "\n" + DISH_FORMAT


def complete_dish_prompt(user_message: str, preferences: DishPreferences) -> str:
    prompt = (
        f'Based on this user request: "{user_message}", generate a complete dish recipe.'
        "\n\nIMPORTANT PREFERENCES TO CONSIDER:"
    )

    # (heading, values, joiner, sentence)
    sections = [
        ("DIETARY RESTRICTIONS", preferences.dietary_restrictions, " and ",
         "The dish must be {}."),
        ("CUISINE INSPIRATION", preferences.cuisines, " and ",
         "The dish should incorporate {} elements."),
        ("PLATE STYLE", preferences.plate_styles[:1], "",
         "The dish should be served as a {}."),
        ("CLASSIC DISH INSPIRATION", preferences.classic_dishes, ", ",
         "The dish should incorporate elements from: {}."),
        ("INGREDIENTS TO AVOID", preferences.ingredient_preferences, ", ",
         "The dish must NOT include: {}."),
        ("WANTED INGREDIENTS", preferences.wanted_ingredients, ", ",
         "The dish MUST include: {}."),
        ("WANTED STYLES", preferences.wanted_styles, " and ",
         "The dish should have {} characteristics."),
        ("WANTED DISH TYPES", preferences.wanted_dish_types, " or ",
         "The dish should be served as: {}."),
        ("WANTED CLASSIC DISHES", preferences.wanted_classic_dishes, ", ",
         "The dish should be inspired by or incorporate elements from: {}."),
        ("WANTED DIETARY", preferences.wanted_dietary, " and ",
         "The dish should be {}."),
    ]
    for heading, values, joiner, sentence in sections:
        if not values:
            continue
        joined = joiner.join(values)
        if heading in ("DIETARY RESTRICTIONS", "PLATE STYLE"):
            joined = joined.lower()
        prompt += f"\n{heading}: {sentence.format(joined)}"

    return prompt + COMPLETE_DISH_FORMAT


def suggestion_summary_prompt(title: str, description: str) -> str:
    return SUGGESTION_SUMMARY_PROMPT.format(title=title, description=description)


def recipe_info_prompt(dish_name: str) -> str:
    return RECIPE_INFO_PROMPT.format(dish_name=dish_name)


def dish_name(dish: dict[str, Any]) -> str:
    return dish.get("name") or dish.get("title") or "this dish"


def dish_steps(dish: dict[str, Any], key: str) -> list[str]:
    """Dishes arrive either flat or with a nested ``recipe`` object."""
    if dish.get(key):
        return [str(step) for step in dish[key]]
    recipe = dish.get("recipe") or {}
    return [str(step) for step in recipe.get(key) or []]


def modification_prompt(
    dish: dict[str, Any], modification: str, *, transformative: bool
) -> str:
    name = dish_name(dish)
    context = RECIPE_CONTEXT.format(
        dish_name=name,
        ingredients=", ".join(dish_steps(dish, "ingredients")),
        instructions=" ".join(dish_steps(dish, "instructions")),
    )
    template = TRANSFORM_RECIPE_PROMPT if transformative else MODIFY_RECIPE_PROMPT
    return template.format(dish_name=name, modification=modification, context=context)


def remix_prompt(
    current_dish: dict[str, Any],
    user_request: str,
    preferences: DishPreferences | None = None,
) -> str:
    preferences = DishPreferences() if preferences is None else preferences
    ingredients = dish_steps(current_dish, "ingredients")
    instructions = dish_steps(current_dish, "instructions")
    preference_lines = [
        f"{label}: {', '.join(values)}"
        for label, values in (
            ("Dietary", preferences.dietary_restrictions),
            ("Cuisine", preferences.cuisines),
            ("Plate Style", preferences.plate_styles),
        )
        if values
    ]
    return REMIX_PROMPT.format(
        title=current_dish.get("title", ""),
        description=current_dish.get("description", ""),
        ingredients=", ".join(ingredients) or "Not specified",
        instructions="; ".join(instructions) or "Not specified",
        user_request=user_request,
        preferences="\n".join(preference_lines),
        recipe_format=RECIPE_JSON_FORMAT,
    )


def fuse_prompt(dish_json: str, modification: str) -> str:
    return FUSE_PROMPT.format(
        dish=dish_json, modification=modification, recipe_format=RECIPE_JSON_FORMAT
    )


def image_prompt(subject: str) -> str:
    return IMAGE_PROMPT.format(subject=subject)
