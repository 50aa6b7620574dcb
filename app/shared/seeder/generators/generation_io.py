"""Sample LLM inputs and outputs attached to generated generations."""

from __future__ import annotations

import random
from typing import Any

MULTIMODAL_IMAGE_URL = (
    "https://upload.wikimedia.org/wikipedia/commons/thumb/d/dd/"
    "Gfp-wisconsin-madison-the-nature-boardwalk.jpg/"
    "2560px-Gfp-wisconsin-madison-the-nature-boardwalk.jpg"
)

MULTIMODAL_INPUT: list[dict[str, Any]] = [
    {
        "role": "user",
        "content": [
            {"text": "What’s depicted in this image?", "type": "text"},
            {"type": "image_url", "image_url": {"url": MULTIMODAL_IMAGE_URL}},
            {"text": "Describe the scene in detail.", "type": "text"},
        ],
    }
]

MULTIMODAL_OUTPUT = (
    "The image depicts a serene landscape featuring a wooden pathway or boardwalk that "
    "winds through a lush green field. The field is filled with tall grass and surrounded "
    "by trees and shrubs. Above, the sky is bright with scattered clouds, suggesting a "
    "clear and pleasant day. The scene conveys a sense of tranquility and natural beauty."
)

CHAT_INPUT: list[dict[str, Any]] = [
    {"role": "system", "content": "Be a helpful assistant"},
    {"role": "user", "content": "How can i create a *React* component?"},
]

RETRIEVAL_INPUT: dict[str, Any] = {
    "input": "How can i create a React component?",
    "retrievedDocuments": [
        {
            "title": "How to create a React component",
            "url": "https://www.google.com",
            "description": "A guide to creating React components",
        },
        {
            "title": "React component creation",
            "url": "https://www.google.com",
            "description": "A guide to creating React components",
        },
    ],
}

REACT_ANSWER = """Creating a React component can be done in two ways: as a functional component or as a class component. Let's start with a basic example of both.

**Image**

![Languse Example Image](https://static.langfuse.com/langfuse-dev/langfuse-example-image.jpeg)

1.  **Functional Component**:

A functional component is just a plain JavaScript function that accepts props as an argument, and returns a React element. Here's how you can create one:

```javascript
import React from 'react';
function Greeting(props) {
  return <h1>Hello, {props.name}</h1>;
}
export default Greeting;
```

To use this component in another file, you can do:

```javascript
import Greeting from './Greeting';
function App() {
  return (
    <div>
      <Greeting name="John" />
    </div>
  );
}
export default App;
```

2.  **Class Component**:

You can also define components as classes in React. These have some additional features compared to functional components:

```javascript
import React, { Component } from 'react';
class Greeting extends Component {
  render() {
    return <h1>Hello, {this.props.name}</h1>;
  }
}
export default Greeting;
```

And here's how to use this component:

```javascript
import Greeting from './Greeting';
class App extends Component {
  render() {
    return (
      <div>
        <Greeting name="John" />
      </div>
    );
  }
}
export default App;
```

With the advent of hooks in React, functional components can do everything that class components can do and hence, the community has been favoring functional components over class components.

Remember to import React at the top of your file whenever you're creating a component, because JSX transpiles to `React.createElement` calls under the hood."""  # noqa: E501


def generation_input_output(rng: random.Random) -> tuple[Any, Any]:
    """Pick an input/output pair for a generation.

    One in ten generations is multimodal; the rest split evenly between a
    chat transcript and a retrieval-augmented input, both answered with the
    same markdown reply.

    Returns:
        (input, output) JSON values.
    """
    if rng.random() > 0.9:
        return MULTIMODAL_INPUT, MULTIMODAL_OUTPUT
    generation_input = CHAT_INPUT if rng.random() > 0.5 else RETRIEVAL_INPUT
    return generation_input, REACT_ANSWER
